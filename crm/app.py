"""FastAPI application factory for CRM Platform."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .errors import register_exception_handlers
from .logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables for SQLite (local dev); other databases use Alembic migrations
    if "sqlite" in settings.database_url:
        from .database import engine
        from .models import Base
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield


configure_logging(settings.log_level)

app = FastAPI(
    title=settings.app_title,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)
register_exception_handlers(app)

# Import and register routers
from .routers import locations, contacts, deals, tags, health  # noqa: E402

app.include_router(locations.router)
app.include_router(contacts.router)
app.include_router(deals.router)
app.include_router(tags.router)
app.include_router(health.router)
