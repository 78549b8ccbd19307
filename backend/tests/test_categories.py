"""Unit tests for the hierarchical category service."""

import pytest

from mobileshop.core.exceptions import (
    CategoryInUseError,
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from mobileshop.db.seed_catalog import build_category_docs
from mobileshop.db.store import Collection, InMemoryDocumentStore
from mobileshop.schemas.category import Category, CategoryCreate, CategoryUpdate
from mobileshop.services.categories import CategoryService, slugify


async def _seeded_service():
    store = InMemoryDocumentStore()
    await store.replace_many(Collection.CATEGORIES, build_category_docs())
    return store, CategoryService(store)


def _assert_path_invariants(categories: list[Category]):
    by_id = {c.id: c for c in categories}
    for c in categories:
        assert c.level == len(c.path) - 1
        assert c.path[-1] == c.slug
        if c.parent_id is not None:
            assert c.path[:-1] == by_id[c.parent_id].path


def _flatten(nodes):
    for node in nodes:
        yield node
        yield from _flatten(node.children)


# ── Slugs ───────────────────────────────────────────

def test_slugify():
    assert slugify("Fast Chargers") == "fast-chargers"
    assert slugify("  USB  C Cables ") == "usb-c-cables"
    assert slugify("Covers & Cases!") == "covers--cases"
    assert slugify("***") == ""


# ── Queries ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_get_children_sorted_by_order():
    _, service = await _seeded_service()
    children = await service.get_children("cat-2")
    assert [c.slug for c in children] == ["wall-chargers", "car-chargers", "cables", "wireless-chargers"]


@pytest.mark.asyncio
async def test_get_descendants_depth_first():
    _, service = await _seeded_service()
    descendants = await service.get_descendants("cat-1")
    assert [d.id for d in descendants] == [
        "cat-1-1", "cat-1-1-1", "cat-1-1-2", "cat-1-2", "cat-1-3",
    ]


@pytest.mark.asyncio
async def test_get_ancestors_root_first():
    _, service = await _seeded_service()
    ancestors = await service.get_ancestors("cat-1-1-1")
    assert [a.id for a in ancestors] == ["cat-1", "cat-1-1"]
    assert await service.get_ancestors("cat-1") == []


@pytest.mark.asyncio
async def test_missing_ids_return_empty_results():
    _, service = await _seeded_service()
    assert await service.get("nope") is None
    assert await service.get_children("nope") == []
    assert await service.get_descendants("nope") == []
    assert await service.get_ancestors("nope") == []


@pytest.mark.asyncio
async def test_list_roots():
    _, service = await _seeded_service()
    roots = await service.list_roots()
    assert [r.id for r in roots] == ["cat-1", "cat-2", "cat-3", "cat-4", "cat-5"]


@pytest.mark.asyncio
async def test_build_tree_contains_every_category_once():
    _, service = await _seeded_service()
    tree = await service.build_tree()
    flat = await service.list_all()

    ids = [node.id for node in _flatten(tree)]
    assert len(ids) == len(set(ids))
    assert set(ids) == {c.id for c in flat}

    for node in _flatten(tree):
        orders = [child.order for child in node.children]
        assert orders == sorted(orders)
    assert [n.slug for n in tree[0].children[0].children] == ["iphone-15-series", "iphone-14-series"]


@pytest.mark.asyncio
async def test_queries_terminate_on_cyclic_data():
    """Malformed parent links must not loop forever."""
    store = InMemoryDocumentStore()
    now = "2026-01-01T00:00:00+00:00"
    docs = [
        {"id": "a", "name": "A", "slug": "a", "parentId": "b", "level": 1, "path": ["b", "a"],
         "order": 1, "createdAt": now, "updatedAt": now},
        {"id": "b", "name": "B", "slug": "b", "parentId": "a", "level": 1, "path": ["a", "b"],
         "order": 2, "createdAt": now, "updatedAt": now},
        {"id": "c", "name": "C", "slug": "c", "parentId": "a", "level": 2, "path": ["b", "a", "c"],
         "order": 1, "createdAt": now, "updatedAt": now},
    ]
    await store.replace_many(Collection.CATEGORIES, docs)
    service = CategoryService(store)

    assert {d.id for d in await service.get_descendants("a")} == {"b", "c"}
    assert [a.id for a in await service.get_ancestors("c")] == ["b", "a"]

    ids = [node.id for node in _flatten(await service.build_tree())]
    assert sorted(ids) == ["a", "b", "c"]


# ── Create ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_root_category_defaults():
    service = CategoryService(InMemoryDocumentStore())
    category = await service.create(CategoryCreate(name="Phone Covers"))

    assert category.slug == "phone-covers"
    assert category.path == ["phone-covers"]
    assert category.level == 0
    assert category.parent_id is None
    assert category.order == 1
    assert category.is_active is True
    assert await service.get(category.id) == category


@pytest.mark.asyncio
async def test_create_child_under_chargers():
    _, service = await _seeded_service()
    child = await service.create(
        CategoryCreate(name="Fast Chargers", slug="fast-chargers", parent_id="cat-2")
    )
    assert child.path == ["chargers", "fast-chargers"]
    assert child.level == 1
    # next after the four existing charger subcategories
    assert child.order == 5


@pytest.mark.asyncio
async def test_create_with_missing_parent_fails():
    store, service = await _seeded_service()
    before = await store.find_all(Collection.CATEGORIES)

    with pytest.raises(NotFoundError):
        await service.create(CategoryCreate(name="Ghost", parent_id="cat-404"))

    assert await store.find_all(Collection.CATEGORIES) == before


@pytest.mark.asyncio
async def test_create_blank_name_fails():
    service = CategoryService(InMemoryDocumentStore())
    with pytest.raises(ValidationError):
        await service.create(CategoryCreate(name="   "))


@pytest.mark.asyncio
async def test_create_duplicate_sibling_slug_fails():
    _, service = await _seeded_service()
    with pytest.raises(ConflictError):
        await service.create(CategoryCreate(name="Cables", parent_id="cat-2"))

    # same slug under a different parent is fine
    other = await service.create(CategoryCreate(name="Cables", parent_id="cat-5"))
    assert other.path == ["power-banks", "cables"]


# ── Update ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_rename_root_slug_rewrites_descendant_paths():
    _, service = await _seeded_service()
    child = await service.create(
        CategoryCreate(name="Fast Chargers", slug="fast-chargers", parent_id="cat-2")
    )

    updated = await service.update("cat-2", CategoryUpdate(slug="power"))

    assert updated.path == ["power"]
    assert (await service.get(child.id)).path == ["power", "fast-chargers"]
    assert (await service.get("cat-2-3")).path == ["power", "cables"]
    _assert_path_invariants(await service.list_all())


@pytest.mark.asyncio
async def test_reparent_moves_whole_subtree():
    _, service = await _seeded_service()
    moved = await service.update("cat-1-1", CategoryUpdate(parent_id="cat-2"))

    assert moved.parent_id == "cat-2"
    assert moved.path == ["chargers", "iphone-cases"]
    assert moved.level == 1
    grandchild = await service.get("cat-1-1-1")
    assert grandchild.path == ["chargers", "iphone-cases", "iphone-15-series"]
    assert grandchild.level == 2
    _assert_path_invariants(await service.list_all())


@pytest.mark.asyncio
async def test_reparent_to_root_with_new_slug():
    _, service = await _seeded_service()
    moved = await service.update("cat-1-1", CategoryUpdate(parent_id=None, slug="apple-cases"))

    assert moved.parent_id is None
    assert moved.level == 0
    assert moved.path == ["apple-cases"]
    assert (await service.get("cat-1-1-2")).path == ["apple-cases", "iphone-14-series"]
    _assert_path_invariants(await service.list_all())


@pytest.mark.asyncio
async def test_reparent_deep_subtree_levels():
    _, service = await _seeded_service()
    await service.update("cat-2", CategoryUpdate(parent_id="cat-1-1-1"))

    cable = await service.get("cat-2-3")
    assert cable.path == ["phone-covers", "iphone-cases", "iphone-15-series", "chargers", "cables"]
    assert cable.level == 4
    _assert_path_invariants(await service.list_all())


@pytest.mark.asyncio
async def test_reparent_under_descendant_is_rejected():
    store, service = await _seeded_service()
    before = await store.find_all(Collection.CATEGORIES)

    with pytest.raises(InvalidOperationError):
        await service.update("cat-1", CategoryUpdate(parent_id="cat-1-1-1"))
    with pytest.raises(InvalidOperationError):
        await service.update("cat-1", CategoryUpdate(parent_id="cat-1"))

    assert await store.find_all(Collection.CATEGORIES) == before


@pytest.mark.asyncio
async def test_reparent_to_missing_parent_fails():
    _, service = await _seeded_service()
    with pytest.raises(NotFoundError):
        await service.update("cat-1-1", CategoryUpdate(parent_id="cat-404"))


@pytest.mark.asyncio
async def test_update_missing_category_fails():
    _, service = await _seeded_service()
    with pytest.raises(NotFoundError):
        await service.update("cat-404", CategoryUpdate(name="Whatever"))


@pytest.mark.asyncio
async def test_plain_field_update_keeps_paths():
    store, service = await _seeded_service()
    updated = await service.update("cat-3", CategoryUpdate(name="Audio", is_active=False))

    assert updated.name == "Audio"
    assert updated.is_active is False
    assert updated.path == ["earphones"]
    assert updated.updated_at >= updated.created_at
    assert (await service.get("cat-3-1")).path == ["earphones", "wireless-earbuds"]


# ── Delete ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_removes_exactly_the_subtree():
    store, service = await _seeded_service()
    total_before = len(await store.find_all(Collection.CATEGORIES))

    deleted = await service.delete("cat-1")

    assert set(deleted) == {"cat-1", "cat-1-1", "cat-1-1-1", "cat-1-1-2", "cat-1-2", "cat-1-3"}
    remaining = {c.id for c in await service.list_all()}
    assert len(remaining) == total_before - len(deleted)
    assert remaining.isdisjoint(deleted)


@pytest.mark.asyncio
async def test_delete_blocked_by_product_in_descendant():
    store, service = await _seeded_service()
    await store.insert(
        Collection.PRODUCTS,
        {"id": "prod-1", "name": "iPhone 15 Case", "category": "cat-1-1-1"},
    )
    before = await store.find_all(Collection.CATEGORIES)

    with pytest.raises(CategoryInUseError) as exc_info:
        await service.delete("cat-1")

    assert exc_info.value.affected_products == [{"id": "prod-1", "name": "iPhone 15 Case"}]
    assert await store.find_all(Collection.CATEGORIES) == before

    # an unrelated subtree can still be removed
    assert "cat-2" in await service.delete("cat-2")


@pytest.mark.asyncio
async def test_delete_missing_category_fails():
    _, service = await _seeded_service()
    with pytest.raises(NotFoundError):
        await service.delete("cat-404")
