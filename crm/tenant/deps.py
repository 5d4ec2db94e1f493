"""FastAPI dependencies for tenant resolution."""

from __future__ import annotations

import hmac

from fastapi import Depends, Path, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..errors import AuthenticationError, NotFoundError
from ..models.location import Location


def _check_tenant_token(request: Request, slug: str) -> None:
    """Verify the location access token before anything touches the store."""
    expected_token = settings.tenant_access_tokens_map.get(slug)
    provided_token = (
        request.headers.get(settings.tenant_token_header, "").strip()
        or request.headers.get("x-location-token", "").strip()
    )

    if expected_token:
        if not provided_token or not hmac.compare_digest(provided_token, expected_token):
            raise AuthenticationError("Location access token required")
    elif settings.tenant_auth_required:
        raise AuthenticationError("Tenant authorization required")


async def get_current_location(
    request: Request,
    slug: str = Path(..., description="Location slug"),
    db: AsyncSession = Depends(get_db),
) -> Location:
    """Resolve location slug to Location model. Raises 404 if not found."""
    _check_tenant_token(request, slug)

    result = await db.execute(select(Location).where(Location.slug == slug))
    location = result.scalar_one_or_none()
    if not location:
        raise NotFoundError(f"Location '{slug}' not found")
    return location

