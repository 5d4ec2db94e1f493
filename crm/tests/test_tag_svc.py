"""Test tag and tag category CRUD."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from crm.errors import ConflictError, NotFoundError, ValidationError
from crm.models.location import Location
from crm.models.tag import Tag
from crm.services import tag_svc


@pytest.mark.asyncio
async def test_create_tag_trims_and_applies_defaults(db: AsyncSession, location: Location):
    tag = await tag_svc.create_tag(db, location.id, "  VIP  ")
    assert tag.name == "VIP"
    assert tag.color == "#3b82f6"
    assert tag.is_active is True
    assert tag.usage_count == 0
    assert tag.created_at is not None


@pytest.mark.asyncio
async def test_create_tag_rejects_blank_name(db: AsyncSession, location: Location):
    with pytest.raises(ValidationError):
        await tag_svc.create_tag(db, location.id, "   ")


@pytest.mark.asyncio
async def test_create_tag_rejects_case_insensitive_duplicate(db: AsyncSession, location: Location):
    await tag_svc.create_tag(db, location.id, "Lead")
    with pytest.raises(ConflictError):
        await tag_svc.create_tag(db, location.id, "lead")


@pytest.mark.asyncio
async def test_same_name_allowed_in_other_location(
    db: AsyncSession, location: Location, other_location: Location
):
    await tag_svc.create_tag(db, location.id, "lead")
    other = await tag_svc.create_tag(db, other_location.id, "lead")
    assert other.location_id == other_location.id


@pytest.mark.asyncio
async def test_create_tag_links_category(db: AsyncSession, location: Location):
    category = await tag_svc.create_category(db, location.id, "Funnel")
    tag = await tag_svc.create_tag(db, location.id, "lead", category_id=category.id)
    assert tag.category_id == category.id
    assert tag.category == "Funnel"


@pytest.mark.asyncio
async def test_create_tag_with_free_text_category(db: AsyncSession, location: Location):
    tag = await tag_svc.create_tag(db, location.id, "lead", category="Sales")
    assert tag.category_id is None
    assert tag.category == "Sales"


@pytest.mark.asyncio
async def test_create_tag_with_foreign_category_is_not_found(
    db: AsyncSession, location: Location, other_location: Location
):
    foreign = await tag_svc.create_category(db, other_location.id, "Theirs")
    with pytest.raises(NotFoundError):
        await tag_svc.create_tag(db, location.id, "lead", category_id=foreign.id)

    tags, total, _, _ = await tag_svc.list_tags(db, location.id)
    assert total == 0
    assert tags == []


@pytest.mark.asyncio
async def test_get_tag_is_tenant_scoped(
    db: AsyncSession, location: Location, other_location: Location
):
    tag = await tag_svc.create_tag(db, other_location.id, "secret")
    with pytest.raises(NotFoundError):
        await tag_svc.get_tag(db, location.id, tag.id)


@pytest.mark.asyncio
async def test_rename_tag_row_only_touches_tag(db: AsyncSession, location: Location, make_contact):
    contact = await make_contact(location, ["lead"])
    tag = await tag_svc.create_tag(db, location.id, "lead")

    tag_svc.rename_tag_row(tag, "prospect")
    await db.commit()

    assert tag.name == "prospect"
    assert contact.tags == ["lead"]


@pytest.mark.asyncio
async def test_list_tags_search_matches_name_and_description(db: AsyncSession, location: Location):
    await tag_svc.create_tag(db, location.id, "Hot Lead")
    await tag_svc.create_tag(db, location.id, "vip", description="Very important LEADS")
    await tag_svc.create_tag(db, location.id, "cold")

    tags, total, _, _ = await tag_svc.list_tags(db, location.id, search="lead")
    assert total == 2
    assert {t.name for t in tags} == {"Hot Lead", "vip"}


@pytest.mark.asyncio
async def test_list_tags_category_filter(db: AsyncSession, location: Location):
    category = await tag_svc.create_category(db, location.id, "Funnel")
    await tag_svc.create_tag(db, location.id, "linked", category_id=category.id)
    await tag_svc.create_tag(db, location.id, "free", category="funnel")
    await tag_svc.create_tag(db, location.id, "other", category="Billing")

    tags, total, _, _ = await tag_svc.list_tags(db, location.id, category="FUNNEL")
    assert total == 2
    assert {t.name for t in tags} == {"linked", "free"}


@pytest.mark.asyncio
async def test_list_tags_is_global_false_returns_active_only(db: AsyncSession, location: Location):
    await tag_svc.create_tag(db, location.id, "on")
    await tag_svc.create_tag(db, location.id, "off", is_active=False)

    _, total_all, _, _ = await tag_svc.list_tags(db, location.id, is_global="true")
    tags, total, _, _ = await tag_svc.list_tags(db, location.id, is_global="false")
    assert total_all == 2
    assert total == 1
    assert tags[0].name == "on"


@pytest.mark.asyncio
async def test_list_tags_sorting(db: AsyncSession, location: Location, make_tag):
    await make_tag(location, "b", usage_count=5)
    await make_tag(location, "a", usage_count=1)
    await make_tag(location, "c", usage_count=9)

    by_name, _, _, _ = await tag_svc.list_tags(db, location.id)
    assert [t.name for t in by_name] == ["a", "b", "c"]

    by_usage, _, _, _ = await tag_svc.list_tags(db, location.id, sort_by="usage")
    assert [t.name for t in by_usage] == ["c", "b", "a"]

    by_usage_asc, _, _, _ = await tag_svc.list_tags(
        db, location.id, sort_by="usage", sort_order="asc"
    )
    assert [t.name for t in by_usage_asc] == ["a", "b", "c"]

    unknown, _, _, _ = await tag_svc.list_tags(db, location.id, sort_by="bogus", sort_order="sideways")
    assert [t.name for t in unknown] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_list_tags_pagination_clamps(db: AsyncSession, location: Location, make_tag):
    for i in range(3):
        await make_tag(location, f"tag-{i}")

    _, total, page, limit = await tag_svc.list_tags(db, location.id, page="0", limit="500")
    assert (total, page, limit) == (3, 1, 100)

    _, _, page, limit = await tag_svc.list_tags(db, location.id, page="-4", limit="0")
    assert (page, limit) == (1, 20)

    _, _, page, limit = await tag_svc.list_tags(db, location.id, limit="-7")
    assert (page, limit) == (1, 1)

    _, _, page, limit = await tag_svc.list_tags(db, location.id, page="abc", limit="xyz")
    assert (page, limit) == (1, 20)

    tags, _, page, limit = await tag_svc.list_tags(db, location.id, page="2", limit="2")
    assert (page, limit) == (2, 2)
    assert [t.name for t in tags] == ["tag-2"]


def test_total_pages():
    assert tag_svc.total_pages(0, 20) == 1
    assert tag_svc.total_pages(20, 20) == 1
    assert tag_svc.total_pages(21, 20) == 2


@pytest.mark.asyncio
async def test_search_tags(db: AsyncSession, location: Location, make_tag):
    await make_tag(location, "Leader")
    await make_tag(location, "lead")
    await make_tag(location, "vip")

    assert await tag_svc.search_tags(db, location.id, "  ") == []
    found = await tag_svc.search_tags(db, location.id, "LEAD")
    assert [t.name for t in found] == ["Leader", "lead"]
    limited = await tag_svc.search_tags(db, location.id, "lead", limit="1")
    assert len(limited) == 1


@pytest.mark.asyncio
async def test_popular_tags_sorted_by_usage(db: AsyncSession, location: Location, make_tag):
    await make_tag(location, "rare", usage_count=1)
    await make_tag(location, "common", usage_count=40)
    await make_tag(location, "mid", usage_count=7)

    popular = await tag_svc.popular_tags(db, location.id, limit="2")
    assert [t.name for t in popular] == ["common", "mid"]


@pytest.mark.asyncio
async def test_apply_tag_fields_category_switch(db: AsyncSession, location: Location):
    category = await tag_svc.create_category(db, location.id, "Funnel")
    tag = await tag_svc.create_tag(db, location.id, "lead", description="keep me")

    await tag_svc.apply_tag_fields(db, tag, category_id=category.id, color="#000000")
    assert (tag.category_id, tag.category, tag.color) == (category.id, "Funnel", "#000000")
    assert tag.description == "keep me"

    await tag_svc.apply_tag_fields(
        db, tag, category="Loose", description=None, fields_set={"category", "description"}
    )
    assert tag.category_id is None
    assert tag.category == "Loose"
    assert tag.description is None


@pytest.mark.asyncio
async def test_category_crud(db: AsyncSession, location: Location):
    category = await tag_svc.create_category(db, location.id, " Funnel ")
    assert category.name == "Funnel"
    assert category.color == "#4A90E2"

    with pytest.raises(ValidationError):
        await tag_svc.create_category(db, location.id, "  ")

    tag = await tag_svc.create_tag(db, location.id, "lead", category_id=category.id)

    updated = await tag_svc.update_category(db, location.id, category.id, name="Pipeline")
    assert updated.name == "Pipeline"
    await db.refresh(tag)
    assert tag.category == "Pipeline"

    categories = await tag_svc.list_categories(db, location.id)
    assert [c.name for c in categories] == ["Pipeline"]
    assert [t.name for t in categories[0].tags] == ["lead"]


@pytest.mark.asyncio
async def test_delete_category_detaches_tags(db: AsyncSession, location: Location):
    category = await tag_svc.create_category(db, location.id, "Funnel")
    tag = await tag_svc.create_tag(db, location.id, "lead", category_id=category.id)

    await tag_svc.delete_category(db, location.id, category.id)

    await db.refresh(tag)
    assert tag.category_id is None
    assert tag.category is None
    assert await db.get(Tag, tag.id) is not None
    with pytest.raises(NotFoundError):
        await tag_svc.get_category(db, location.id, category.id)


@pytest.mark.asyncio
async def test_update_unknown_category_is_not_found(db: AsyncSession, location: Location):
    with pytest.raises(NotFoundError):
        await tag_svc.update_category(db, location.id, uuid.uuid4(), name="x")


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(db: AsyncSession, location: Location, make_tag):
    for name in ("a_b", "axb", "100%", "1000"):
        await make_tag(location, name)

    tags, total, _, _ = await tag_svc.list_tags(db, location.id, search="_")
    assert total == 1
    assert [t.name for t in tags] == ["a_b"]

    found = await tag_svc.search_tags(db, location.id, "100%")
    assert [t.name for t in found] == ["100%"]
