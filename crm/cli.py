"""CRM CLI - serve the API, run migrations and maintain tag usage counts."""

from __future__ import annotations

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import select

from .config import settings
from .database import make_engine, make_session_factory
from .models.location import Location
from .models.tag import Tag
from .services import tag_usage_svc

app = typer.Typer(
    name="crm",
    help="CRM platform with tag reconciliation",
    no_args_is_help=True,
)
console = Console()


@app.command("serve")
def serve(
    port: int = typer.Option(8020, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the CRM API."""
    import uvicorn

    console.print(f"[bold cyan]Starting CRM API at http://{host}:{port}[/bold cyan]")
    uvicorn.run("crm.app:app", host=host, port=port, reload=reload)


@app.command("migrate")
def migrate(
    revision: str = typer.Argument("head", help="Target revision"),
):
    """Apply Alembic migrations to the configured database."""
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(settings.base_dir / "alembic.ini"))
    command.upgrade(cfg, revision)
    console.print(f"[green]Database upgraded to {revision}[/green]")


async def _recalculate(database_url: str, slug: str, dry_run: bool) -> list[dict]:
    engine = make_engine(database_url)
    session_factory = make_session_factory(engine)
    try:
        async with session_factory() as db:
            location = (
                await db.execute(select(Location).where(Location.slug == slug))
            ).scalar_one_or_none()
            if not location:
                raise typer.BadParameter(f"Location '{slug}' not found")

            result = await db.execute(select(Tag).where(Tag.location_id == location.id))
            before = {t.id: t.usage_count for t in result.scalars().all()}
            tags = await tag_usage_svc.recalculate(db, location.id, list(before))
            rows = [
                {"tag": t.name, "before": before[t.id], "after": t.usage_count}
                for t in sorted(tags, key=lambda t: t.name)
            ]
            if dry_run:
                await db.rollback()
            else:
                await db.commit()
            return rows
    finally:
        await engine.dispose()


@app.command("recalc-usage")
def recalc_usage(
    slug: str = typer.Argument(..., help="Location slug"),
    database_url: str = typer.Option(None, "--database-url", help="Override CRM_DATABASE_URL"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report without saving"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Recompute usage counts for every tag in a location."""
    rows = asyncio.run(_recalculate(database_url or settings.database_url, slug, dry_run))

    if json_output:
        console.print_json(json.dumps({"location": slug, "dryRun": dry_run, "tags": rows}))
        return

    table = Table(title=f"Tag usage for {slug}")
    table.add_column("Tag", style="cyan")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right", style="green")
    for row in rows:
        table.add_row(row["tag"], str(row["before"]), str(row["after"]))
    console.print(table)
    if dry_run:
        console.print("[yellow]Dry run: nothing was saved[/yellow]")


if __name__ == "__main__":
    app()
