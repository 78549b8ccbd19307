"""Seed the default category tree, alert settings and a few demo products.

Default tree:
  Phone Covers        ── iPhone Cases ── iPhone 15 Series, iPhone 14 Series
                      ── Samsung Cases, Other Brands
  Chargers            ── Wall Chargers, Car Chargers, Cables, Wireless Chargers
  Earphones           ── Wireless Earbuds, Wired Earphones, Headphones
  Screen Protectors   ── iPhone Screen Protectors, Samsung Screen Protectors
  Power Banks

Collections that already hold documents are left untouched.
"""

import logging

from mobileshop.db.store import Collection, DocumentStore
from mobileshop.schemas.alert import AlertSettings
from mobileshop.schemas.common import utcnow

logger = logging.getLogger(__name__)

# (id, name, slug, parent id, order)
DEFAULT_CATEGORIES: list[tuple[str, str, str, str | None, int]] = [
    ("cat-1", "Phone Covers", "phone-covers", None, 1),
    ("cat-2", "Chargers", "chargers", None, 2),
    ("cat-3", "Earphones", "earphones", None, 3),
    ("cat-4", "Screen Protectors", "screen-protectors", None, 4),
    ("cat-5", "Power Banks", "power-banks", None, 5),
    ("cat-1-1", "iPhone Cases", "iphone-cases", "cat-1", 1),
    ("cat-1-2", "Samsung Cases", "samsung-cases", "cat-1", 2),
    ("cat-1-3", "Other Brands", "other-brands", "cat-1", 3),
    ("cat-1-1-1", "iPhone 15 Series", "iphone-15-series", "cat-1-1", 1),
    ("cat-1-1-2", "iPhone 14 Series", "iphone-14-series", "cat-1-1", 2),
    ("cat-2-1", "Wall Chargers", "wall-chargers", "cat-2", 1),
    ("cat-2-2", "Car Chargers", "car-chargers", "cat-2", 2),
    ("cat-2-3", "Cables", "cables", "cat-2", 3),
    ("cat-2-4", "Wireless Chargers", "wireless-chargers", "cat-2", 4),
    ("cat-3-1", "Wireless Earbuds", "wireless-earbuds", "cat-3", 1),
    ("cat-3-2", "Wired Earphones", "wired-earphones", "cat-3", 2),
    ("cat-3-3", "Headphones", "headphones", "cat-3", 3),
    ("cat-4-1", "iPhone Screen Protectors", "iphone-screen-protectors", "cat-4", 1),
    ("cat-4-2", "Samsung Screen Protectors", "samsung-screen-protectors", "cat-4", 2),
]

# (id, name, category id, price, stock quantity)
DEFAULT_PRODUCTS: list[tuple[str, str, str, float, int | None]] = [
    ("prod-1", "iPhone 15 Silicone Case", "cat-1-1-1", 2500, 24),
    ("prod-2", "20W USB-C Wall Charger", "cat-2-1", 3500, 6),
    ("prod-3", "USB-C to Lightning Cable 1m", "cat-2-3", 1200, 0),
    ("prod-4", "Bluetooth Earbuds Pro", "cat-3-1", 8900, 3),
    ("prod-5", "Tempered Glass iPhone 15", "cat-4-1", 900, None),
]


def build_category_docs() -> list[dict]:
    now = utcnow().isoformat()
    by_id: dict[str, dict] = {}
    for cid, name, slug, parent_id, order in DEFAULT_CATEGORIES:
        path = [*by_id[parent_id]["path"], slug] if parent_id else [slug]
        by_id[cid] = {
            "id": cid,
            "name": name,
            "slug": slug,
            "description": "",
            "image": "",
            "parentId": parent_id,
            "level": len(path) - 1,
            "path": path,
            "isActive": True,
            "order": order,
            "createdAt": now,
            "updatedAt": now,
        }
    return list(by_id.values())


def build_product_docs() -> list[dict]:
    now = utcnow().isoformat()
    docs = []
    for pid, name, category, price, quantity in DEFAULT_PRODUCTS:
        if quantity is None:
            status = "in_stock"
        elif quantity == 0:
            status = "out_of_stock"
        elif quantity <= 10:
            status = "low_stock"
        else:
            status = "in_stock"
        docs.append({
            "id": pid,
            "name": name,
            "category": category,
            "price": price,
            "description": "",
            "image": "",
            "published": True,
            "stockQuantity": quantity,
            "stockStatus": status,
            "createdAt": now,
            "updatedAt": now,
        })
    return docs


async def seed_catalog(store: DocumentStore, default_threshold: int = 10) -> dict[str, str]:
    results: dict[str, str] = {}

    if await store.find_by_id(Collection.ALERT_SETTINGS, "global") is None:
        settings = AlertSettings(global_low_stock_threshold=default_threshold)
        await store.replace_many(Collection.ALERT_SETTINGS, [{"id": "global", **settings.to_document()}])
        results["alert_settings"] = "Created"
    else:
        results["alert_settings"] = "Already exists"

    seeds = {
        Collection.CATEGORIES: build_category_docs,
        Collection.PRODUCTS: build_product_docs,
    }
    for collection, build in seeds.items():
        existing = await store.find_all(collection)
        if existing:
            results[collection.value] = f"Already has {len(existing)} documents"
            continue
        docs = build()
        await store.replace_many(collection, docs)
        results[collection.value] = f"Created {len(docs)} documents"

    logger.info(f"Seed results: {results}")
    return results
