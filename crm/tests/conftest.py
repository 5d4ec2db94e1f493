"""Async test fixtures for CRM tests using SQLite."""

from __future__ import annotations

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from crm.models.base import Base
from crm.models.contact import Contact
from crm.models.deal import Deal
from crm.models.location import Location
from crm.models.tag import DealTag, Tag
from crm.database import get_db, make_engine, make_session_factory


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = make_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = make_session_factory(engine)
    async with session_factory() as session:
        yield session


async def _make_location(db: AsyncSession, name: str, slug: str) -> Location:
    loc = Location(id=uuid.uuid4(), name=name, slug=slug, timezone="UTC")
    db.add(loc)
    await db.commit()
    await db.refresh(loc)
    return loc


@pytest_asyncio.fixture
async def location(db: AsyncSession):
    return await _make_location(db, "Test Location", "test-location")


@pytest_asyncio.fixture
async def other_location(db: AsyncSession):
    return await _make_location(db, "Other Location", "other-location")


@pytest.fixture
def make_contact(db: AsyncSession):
    async def _make(location: Location, tags: list[str], **kwargs) -> Contact:
        contact = Contact(location_id=location.id, tags=list(tags), **kwargs)
        db.add(contact)
        await db.commit()
        await db.refresh(contact)
        return contact

    return _make


@pytest.fixture
def make_tag(db: AsyncSession):
    async def _make(location: Location, name: str, **kwargs) -> Tag:
        tag = Tag(location_id=location.id, name=name, **kwargs)
        db.add(tag)
        await db.commit()
        await db.refresh(tag)
        return tag

    return _make


@pytest.fixture
def make_deal(db: AsyncSession):
    async def _make(location: Location, name: str, tags: list[Tag] = ()) -> Deal:
        deal = Deal(location_id=location.id, name=name)
        db.add(deal)
        await db.flush()
        for tag in tags:
            db.add(DealTag(location_id=location.id, deal_id=deal.id, tag_id=tag.id))
        await db.commit()
        await db.refresh(deal)
        return deal

    return _make


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client against the CRM app."""
    from crm.app import app

    session_factory = make_session_factory(engine)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
