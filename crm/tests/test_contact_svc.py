"""Test contact service."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from crm.errors import NotFoundError
from crm.models.location import Location
from crm.services import contact_svc, deal_svc


@pytest.mark.asyncio
async def test_create_and_get_contact(db: AsyncSession, location: Location):
    contact = await contact_svc.create_contact(
        db, location.id, first_name="Alice", last_name="Smith", email="alice@test.com"
    )
    assert contact.full_name == "Alice Smith"
    assert contact.tags == []

    fetched = await contact_svc.get_contact(db, location.id, contact.id)
    assert fetched.email == "alice@test.com"


@pytest.mark.asyncio
async def test_get_contact_is_tenant_scoped(
    db: AsyncSession, location: Location, other_location: Location
):
    contact = await contact_svc.create_contact(db, other_location.id, first_name="Zed")
    with pytest.raises(NotFoundError):
        await contact_svc.get_contact(db, location.id, contact.id)


@pytest.mark.asyncio
async def test_create_contact_normalizes_tags(db: AsyncSession, location: Location):
    contact = await contact_svc.create_contact(
        db, location.id, first_name="Tess", tags=[" vip ", "", "lead", "vip"]
    )
    assert contact.tags == ["vip", "lead"]


@pytest.mark.asyncio
async def test_list_contacts_with_search(db: AsyncSession, location: Location):
    await contact_svc.create_contact(db, location.id, first_name="Bob", email="bob@test.com")
    await contact_svc.create_contact(db, location.id, first_name="Carol", email="carol@test.com")

    contacts, total = await contact_svc.list_contacts(db, location.id, search="bob")
    assert total == 1
    assert contacts[0].first_name == "Bob"


@pytest.mark.asyncio
async def test_list_contacts_pagination(db: AsyncSession, location: Location):
    for i in range(5):
        await contact_svc.create_contact(db, location.id, first_name=f"User{i}")

    contacts, total = await contact_svc.list_contacts(db, location.id, limit=2)
    assert total == 5
    assert len(contacts) == 2


@pytest.mark.asyncio
async def test_list_contacts_by_tag(db: AsyncSession, location: Location, make_contact):
    await make_contact(location, ["Special", "vip"], first_name="Tagged")
    await make_contact(location, ["special"], first_name="Lowercase")
    await make_contact(location, [], first_name="Untagged")

    contacts, total = await contact_svc.list_contacts(db, location.id, tag_name="Special")
    assert total == 1
    assert contacts[0].first_name == "Tagged"


@pytest.mark.asyncio
async def test_contacts_with_any_tag(
    db: AsyncSession, location: Location, other_location: Location, make_contact
):
    a = await make_contact(location, ["hot"])
    b = await make_contact(location, ["warm", "vip"])
    await make_contact(location, ["cold"])
    await make_contact(other_location, ["hot"])

    found = await contact_svc.contacts_with_any_tag(db, location.id, ["hot", "warm"])
    assert {c.id for c in found} == {a.id, b.id}
    assert await contact_svc.contacts_with_any_tag(db, location.id, []) == []


@pytest.mark.asyncio
async def test_update_contact(db: AsyncSession, location: Location):
    contact = await contact_svc.create_contact(db, location.id, first_name="Dan")
    updated = await contact_svc.update_contact(
        db, location.id, contact.id, last_name="Brown", tags=["b", "a", "b"]
    )
    assert updated.last_name == "Brown"
    assert updated.first_name == "Dan"
    assert updated.tags == ["b", "a"]


@pytest.mark.asyncio
async def test_delete_contact_detaches_deals(db: AsyncSession, location: Location):
    contact = await contact_svc.create_contact(db, location.id, first_name="Eve")
    deal = await deal_svc.create_deal(db, location.id, name="Eve's deal", contact_id=contact.id)

    await contact_svc.delete_contact(db, location.id, contact.id)

    with pytest.raises(NotFoundError):
        await contact_svc.get_contact(db, location.id, contact.id)
    await db.refresh(deal)
    assert deal.contact_id is None


def test_normalize_tag_names():
    assert contact_svc.normalize_tag_names(None) == []
    assert contact_svc.normalize_tag_names(["  a", "b ", "a", " "]) == ["a", "b"]


@pytest.mark.asyncio
async def test_list_contacts_search_treats_wildcards_literally(
    db: AsyncSession, location: Location
):
    await contact_svc.create_contact(db, location.id, email="first_last@test.com")
    await contact_svc.create_contact(db, location.id, email="firstxlast@test.com")

    contacts, total = await contact_svc.list_contacts(db, location.id, search="t_l")
    assert total == 1
    assert contacts[0].email == "first_last@test.com"
