"""CRM configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class CRMSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///crm.db"
    echo_sql: bool = False
    app_title: str = "CRM Platform"
    log_level: str = "INFO"

    # Tenant access: requests to /api/loc/{slug}/... must carry the slug's token
    tenant_auth_required: bool = False
    tenant_access_tokens: str = ""
    tenant_token_header: str = "X-Location-Token"

    tag_default_color: str = "#3b82f6"
    category_default_color: str = "#4A90E2"

    model_config = {"env_prefix": "CRM_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def tenant_access_tokens_map(self) -> dict[str, str]:
        """Parse comma-separated slug:token pairs."""
        mapping: dict[str, str] = {}
        if not self.tenant_access_tokens.strip():
            return mapping

        for item in self.tenant_access_tokens.split(","):
            pair = item.strip()
            if not pair or ":" not in pair:
                continue
            slug, token = pair.split(":", 1)
            slug = slug.strip()
            token = token.strip()
            if slug and token:
                mapping[slug] = token
        return mapping

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = CRMSettings()
