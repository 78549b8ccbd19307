"""Endpoint functions called directly over an in-memory store, plus error mapping."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from mobileshop.core.exceptions import CategoryInUseError, InvalidOperationError, NotFoundError, ValidationError
from mobileshop.db.seed_catalog import build_category_docs, seed_catalog
from mobileshop.db.store import Collection, InMemoryDocumentStore
from mobileshop.schemas.auth import CurrentAdmin
from mobileshop.services.alerts import AlertService
from mobileshop.services.categories import CategoryService

ADMIN = CurrentAdmin(username="admin", role="admin")


async def _category_service():
    store = InMemoryDocumentStore()
    await store.replace_many(Collection.CATEGORIES, build_category_docs())
    return store, CategoryService(store)


# ── Categories ──────────────────────────────────────

@pytest.mark.asyncio
async def test_list_categories_views():
    from mobileshop.api.categories import list_categories

    _, service = await _category_service()

    flat = await list_categories(view="flat", parent_id=None, service=service)
    assert flat.total == len(build_category_docs())

    roots = await list_categories(view="roots", parent_id=None, service=service)
    assert [c.id for c in roots.items] == ["cat-1", "cat-2", "cat-3", "cat-4", "cat-5"]

    tree = await list_categories(view="tree", parent_id=None, service=service)
    assert tree.total == 5
    assert [c.id for c in tree.items[1].children] == ["cat-2-1", "cat-2-2", "cat-2-3", "cat-2-4"]

    children = await list_categories(view="flat", parent_id="cat-3", service=service)
    assert [c.slug for c in children.items] == ["wireless-earbuds", "wired-earphones", "headphones"]


@pytest.mark.asyncio
async def test_get_category_detail():
    from mobileshop.api.categories import get_category

    _, service = await _category_service()
    detail = await get_category(
        "cat-1-1", include_children=True, include_ancestors=True, service=service,
    )
    assert detail.category.slug == "iphone-cases"
    assert [c.id for c in detail.children] == ["cat-1-1-1", "cat-1-1-2"]
    assert [a.id for a in detail.ancestors] == ["cat-1"]

    bare = await get_category("cat-1", include_children=False, include_ancestors=False, service=service)
    assert bare.children is None and bare.ancestors is None


@pytest.mark.asyncio
async def test_get_category_not_found():
    from mobileshop.api.categories import get_category

    _, service = await _category_service()
    with pytest.raises(HTTPException) as exc_info:
        await get_category("cat-404", include_children=False, include_ancestors=False, service=service)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_category_response_uses_camel_case():
    from mobileshop.api.categories import create_category
    from mobileshop.schemas.category import CategoryCreate

    _, service = await _category_service()
    created = await create_category(
        CategoryCreate.model_validate({"name": "Fast Chargers", "parentId": "cat-2"}),
        current_admin=ADMIN,
        service=service,
    )
    payload = created.model_dump(mode="json", by_alias=True)
    assert payload["parentId"] == "cat-2"
    assert payload["path"] == ["chargers", "fast-chargers"]
    assert "isActive" in payload and "createdAt" in payload


@pytest.mark.asyncio
async def test_delete_category_endpoint():
    from mobileshop.api.categories import delete_category

    _, service = await _category_service()
    result = await delete_category("cat-2", current_admin=ADMIN, service=service)
    assert len(result.deleted_ids) == 5
    assert result.message == "Category and 4 subcategories deleted"


# ── Alerts ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_alert_endpoints_flow():
    from mobileshop.api.alerts import check_alerts, list_alerts, mark_all_read, update_alert

    store = InMemoryDocumentStore()
    await seed_catalog(store)
    service = AlertService(store)

    scan = await check_alerts(current_admin=ADMIN, service=service)
    # seeded products: one at 0, two under the threshold, one healthy, one untracked
    assert scan.count == 3
    assert (await check_alerts(current_admin=ADMIN, service=service)).count == 0

    feed = await list_alerts(
        unread_only=False, show_dismissed=False, include_settings=True,
        current_admin=ADMIN, service=service,
    )
    assert feed.alerts[0].priority.value == "critical"
    assert feed.unread_count == 3
    assert feed.settings.global_low_stock_threshold == 10

    dismissed = await update_alert(feed.alerts[0].id, "dismiss", current_admin=ADMIN, service=service)
    assert dismissed.is_dismissed is True

    bulk = await mark_all_read(current_admin=ADMIN, service=service)
    assert bulk.updated == 3


# ── Seeding ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_seed_catalog_only_fills_empty_collections():
    store = InMemoryDocumentStore()
    first = await seed_catalog(store)
    second = await seed_catalog(store)

    assert first["alert_settings"] == "Created"
    assert first["categories"].startswith("Created")
    assert second["alert_settings"] == "Already exists"
    assert second["categories"].startswith("Already has")

    categories = await CategoryService(store).list_all()
    by_id = {c.id: c for c in categories}
    for c in categories:
        assert c.level == len(c.path) - 1
        if c.parent_id:
            assert c.path[:-1] == by_id[c.parent_id].path


# ── Error mapping ───────────────────────────────────

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc, status_code",
    [
        (NotFoundError("missing"), 404),
        (InvalidOperationError("cycle"), 400),
        (ValidationError("name required"), 422),
    ],
)
async def test_shop_error_handler_status_codes(exc, status_code):
    from mobileshop.main import shop_error_handler

    response = await shop_error_handler(MagicMock(), exc)
    assert response.status_code == status_code
    assert json.loads(response.body) == {"detail": exc.detail}


@pytest.mark.asyncio
async def test_category_in_use_renders_affected_products():
    from mobileshop.main import shop_error_handler

    exc = CategoryInUseError("in use", affected_products=[{"id": "prod-1", "name": "Case"}])
    response = await shop_error_handler(MagicMock(), exc)
    assert response.status_code == 409
    assert json.loads(response.body)["affectedProducts"] == [{"id": "prod-1", "name": "Case"}]
