"""Hierarchical category management.

Categories form a forest stored as an adjacency list (`parentId`) with a
materialized `path` of slugs from the root and a `level` equal to
``len(path) - 1``. Every mutation loads the collection, validates, and then
writes all changed documents in one store call.
"""

import logging
import re
import uuid
from collections import defaultdict
from collections.abc import Iterable

from mobileshop.core.exceptions import (
    CategoryInUseError,
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from mobileshop.db.store import Collection, DocumentStore
from mobileshop.schemas.category import Category, CategoryCreate, CategoryNode, CategoryUpdate
from mobileshop.schemas.common import utcnow

logger = logging.getLogger(__name__)


def slugify(value: str) -> str:
    """Lowercase, whitespace to hyphens, then keep only [a-z0-9-]."""
    slug = re.sub(r"\s+", "-", value.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def _new_id() -> str:
    return f"cat-{uuid.uuid4().hex[:12]}"


def _group_children(categories: Iterable[Category]) -> dict[str | None, list[Category]]:
    children: dict[str | None, list[Category]] = defaultdict(list)
    for category in categories:
        children[category.parent_id].append(category)
    for siblings in children.values():
        siblings.sort(key=lambda c: c.order)
    return children


def _collect_descendants(by_id: dict[str, Category], category_id: str) -> list[Category]:
    """Depth-first, children in `order`. The seen-set stops on cyclic parent links."""
    children = _group_children(by_id.values())
    seen = {category_id}
    result: list[Category] = []
    stack = list(reversed(children.get(category_id, [])))
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        result.append(node)
        stack.extend(reversed(children.get(node.id, [])))
    return result


def _collect_ancestors(by_id: dict[str, Category], category: Category) -> list[Category]:
    ancestors: list[Category] = []
    seen = {category.id}
    current = category
    while current.parent_id is not None:
        parent = by_id.get(current.parent_id)
        if parent is None or parent.id in seen:
            break
        seen.add(parent.id)
        ancestors.append(parent)
        current = parent
    ancestors.reverse()
    return ancestors


def _on_parent_cycle(by_id: dict[str, Category], category: Category) -> bool:
    seen: set[str] = set()
    current = category
    while current.parent_id is not None and current.parent_id in by_id:
        if current.parent_id == category.id:
            return True
        if current.parent_id in seen:
            return False
        seen.add(current.parent_id)
        current = by_id[current.parent_id]
    return False


def _rebase_descendants(by_id: dict[str, Category], root: Category, now) -> list[Category]:
    """Recompute path/level below `root` after its path changed."""
    children = _group_children(by_id.values())
    rebased: list[Category] = []
    seen = {root.id}
    stack = [(root.id, root.path)]
    while stack:
        parent_id, parent_path = stack.pop()
        for child in children.get(parent_id, []):
            if child.id in seen:
                continue
            seen.add(child.id)
            path = [*parent_path, child.slug]
            rebased.append(
                child.model_copy(update={"path": path, "level": len(path) - 1, "updated_at": now})
            )
            stack.append((child.id, path))
    return rebased


class CategoryService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def _load(self) -> dict[str, Category]:
        docs = await self.store.find_all(Collection.CATEGORIES)
        return {doc["id"]: Category.model_validate(doc) for doc in docs}

    # ── Queries ────────────────────────────────────

    async def get(self, category_id: str) -> Category | None:
        doc = await self.store.find_by_id(Collection.CATEGORIES, category_id)
        return Category.model_validate(doc) if doc else None

    async def list_all(self) -> list[Category]:
        categories = list((await self._load()).values())
        categories.sort(key=lambda c: (c.level, c.order))
        return categories

    async def list_roots(self) -> list[Category]:
        return _group_children((await self._load()).values()).get(None, [])

    async def get_children(self, parent_id: str) -> list[Category]:
        docs = await self.store.find_by_field(Collection.CATEGORIES, "parentId", parent_id)
        children = [Category.model_validate(doc) for doc in docs]
        children.sort(key=lambda c: c.order)
        return children

    async def get_descendants(self, category_id: str) -> list[Category]:
        by_id = await self._load()
        if category_id not in by_id:
            return []
        return _collect_descendants(by_id, category_id)

    async def get_ancestors(self, category_id: str) -> list[Category]:
        """Ancestors ordered root first, excluding the category itself."""
        by_id = await self._load()
        category = by_id.get(category_id)
        if category is None:
            return []
        return _collect_ancestors(by_id, category)

    async def build_tree(self) -> list[CategoryNode]:
        """Nest the flat collection into a forest sorted by `order` at every level.

        A category whose parent is missing, or which sits on a parent cycle,
        is promoted to a root so that each id appears exactly once.
        """
        by_id = await self._load()
        nodes = {cid: CategoryNode.model_validate(cat.model_dump()) for cid, cat in by_id.items()}
        roots: list[CategoryNode] = []
        for cid, category in by_id.items():
            node = nodes[cid]
            parent_id = category.parent_id
            if parent_id is None or parent_id not in nodes or _on_parent_cycle(by_id, category):
                roots.append(node)
            else:
                nodes[parent_id].children.append(node)

        for node in nodes.values():
            node.children.sort(key=lambda c: c.order)
        roots.sort(key=lambda c: c.order)
        return roots

    # ── Mutations ──────────────────────────────────

    async def create(self, data: CategoryCreate) -> Category:
        name = data.name.strip()
        if not name:
            raise ValidationError("Category name is required")
        slug = slugify(data.slug or name)
        if not slug:
            raise ValidationError("Category slug must contain at least one letter or digit")

        by_id = await self._load()
        parent = None
        if data.parent_id is not None:
            parent = by_id.get(data.parent_id)
            if parent is None:
                raise NotFoundError(f"Parent category '{data.parent_id}' not found")

        siblings = [c for c in by_id.values() if c.parent_id == data.parent_id]
        if any(s.slug == slug for s in siblings):
            raise ConflictError(f"A sibling category with slug '{slug}' already exists")

        if data.order is not None:
            order = data.order
        else:
            order = max((s.order for s in siblings), default=0) + 1

        path = [*parent.path, slug] if parent else [slug]
        now = utcnow()
        category = Category(
            id=_new_id(),
            name=name,
            slug=slug,
            description=data.description,
            image=data.image,
            parent_id=data.parent_id,
            level=len(path) - 1,
            path=path,
            is_active=data.is_active,
            order=order,
            created_at=now,
            updated_at=now,
        )
        await self.store.insert(Collection.CATEGORIES, category.to_document())
        logger.info(f"Category created: {category.id} path={'/'.join(path)}")
        return category

    async def update(self, category_id: str, patch: CategoryUpdate) -> Category:
        by_id = await self._load()
        current = by_id.get(category_id)
        if current is None:
            raise NotFoundError(f"Category '{category_id}' not found")

        changes = patch.model_dump(exclude_unset=True)
        # null means "leave unchanged" for everything except parentId
        for field in ("name", "description", "image", "is_active", "order"):
            if field in changes and changes[field] is None:
                del changes[field]
        if "name" in changes:
            if not changes["name"].strip():
                raise ValidationError("Category name is required")
            changes["name"] = changes["name"].strip()

        new_slug = current.slug
        if changes.get("slug"):
            new_slug = slugify(changes["slug"])
            if not new_slug:
                raise ValidationError("Category slug must contain at least one letter or digit")
        changes.pop("slug", None)

        parent_changed = "parent_id" in changes and changes["parent_id"] != current.parent_id
        new_parent_id = changes.pop("parent_id") if parent_changed else current.parent_id
        changes.pop("parent_id", None)

        if parent_changed and new_parent_id is not None:
            if new_parent_id == current.id:
                raise InvalidOperationError("A category cannot be its own parent")
            descendant_ids = {d.id for d in _collect_descendants(by_id, current.id)}
            if new_parent_id in descendant_ids:
                raise InvalidOperationError("A category cannot be moved under one of its descendants")
            parent = by_id.get(new_parent_id)
            if parent is None:
                raise NotFoundError(f"Parent category '{new_parent_id}' not found")
            path = [*parent.path, new_slug]
        elif parent_changed:
            path = [new_slug]
        else:
            path = [*current.path[:-1], new_slug]

        slug_changed = new_slug != current.slug
        if slug_changed or parent_changed:
            clash = any(
                c.parent_id == new_parent_id and c.slug == new_slug and c.id != current.id
                for c in by_id.values()
            )
            if clash:
                raise ConflictError(f"A sibling category with slug '{new_slug}' already exists")

        now = utcnow()
        updated = current.model_copy(
            update={
                **changes,
                "slug": new_slug,
                "parent_id": new_parent_id,
                "path": path,
                "level": len(path) - 1,
                "updated_at": now,
            }
        )
        to_write = [updated]
        if slug_changed or parent_changed:
            to_write.extend(_rebase_descendants(by_id, updated, now))

        await self.store.replace_many(Collection.CATEGORIES, [c.to_document() for c in to_write])
        logger.info(
            f"Category updated: {category_id} path={'/'.join(path)} "
            f"({len(to_write) - 1} descendant path(s) rewritten)"
        )
        return updated

    async def delete(self, category_id: str) -> list[str]:
        """Delete a category and its whole subtree, returning the removed ids.

        Refused with CategoryInUseError, and nothing removed, while any product
        references the category or one of its descendants.
        """
        by_id = await self._load()
        if category_id not in by_id:
            raise NotFoundError(f"Category '{category_id}' not found")

        descendants = _collect_descendants(by_id, category_id)
        subtree_ids = [category_id, *(d.id for d in descendants)]
        subtree = set(subtree_ids)

        products = await self.store.find_all(Collection.PRODUCTS)
        affected = [
            {"id": p["id"], "name": p.get("name", "")}
            for p in products
            if p.get("category") in subtree
        ]
        if affected:
            logger.warning(f"Refused to delete category {category_id}: {len(affected)} product(s) in use")
            raise CategoryInUseError(
                f"Cannot delete category. {len(affected)} product(s) are using this "
                f"category or its subcategories.",
                affected_products=affected,
            )

        await self.store.delete_many(Collection.CATEGORIES, subtree_ids)
        logger.info(f"Category deleted: {category_id} with {len(descendants)} subcategories")
        return subtree_ids
