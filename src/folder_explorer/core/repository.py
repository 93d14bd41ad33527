"""Hierarchy repository: the one place that enforces folder/file invariants.

Callers never talk to an ``EntityStore`` directly. Every operation that
touches more than one row runs inside ``store.transaction()`` so that a
cascade is applied (and becomes visible) as a single unit.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from folder_explorer.core.errors import (
    CreationFailedError,
    NodeNotDeletedError,
    NotFoundError,
    ParentNotContainerError,
    ValidationError,
)
from folder_explorer.core.pagination import (
    build_cursor_page,
    clamp_limit,
    decode_cursor,
    empty_cursor_page,
)
from folder_explorer.core.ports.store import EntityStore
from folder_explorer.core.traversal import build_tree, collect_descendant_ids
from folder_explorer.models import (
    MAX_NAME_LENGTH,
    CursorPage,
    HierarchyNode,
    OffsetPage,
    Pagination,
    TreeNode,
)

logger = logging.getLogger(__name__)


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Folder name is required and cannot be empty", details={"field": "name"})
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Folder name must be at most {MAX_NAME_LENGTH} characters",
            details={"field": "name", "length": len(cleaned)},
        )
    return cleaned


def _check_id(node_id: int | None) -> int:
    if node_id is None or isinstance(node_id, bool) or not isinstance(node_id, int) or node_id <= 0:
        raise ValidationError("Invalid folder ID", details={"field": "id", "value": node_id})
    return node_id


class HierarchyRepository:
    def __init__(
        self,
        store: EntityStore,
        default_page_size: int = 50,
        max_page_size: int = 100,
        max_search_results: int = 100,
    ) -> None:
        self._store = store
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.max_search_results = max_search_results

    async def dispose(self) -> None:
        await self._store.dispose()

    # --- writes -----------------------------------------------------------

    async def create(self, name: str, parent_id: int | None = None, is_container: bool = True) -> HierarchyNode:
        cleaned = _clean_name(name)
        logger.debug("create name=%r parent_id=%s is_container=%s", cleaned, parent_id, is_container)

        async with self._store.transaction() as tx:
            if parent_id is not None:
                parent = await tx.get(parent_id)
                if parent is None:
                    raise NotFoundError(parent_id, details={"field": "parentId"})
                if not parent.is_container:
                    raise ParentNotContainerError(parent_id)

            new_id = await tx.insert(cleaned, parent_id, is_container)
            created = await tx.get(new_id)
            if created is None:
                raise CreationFailedError("Failed to create folder", details={"insertId": new_id})
        return created

    async def rename(self, node_id: int, name: str) -> HierarchyNode:
        _check_id(node_id)
        cleaned = _clean_name(name)
        logger.debug("rename id=%s name=%r", node_id, cleaned)

        async with self._store.transaction() as tx:
            if await tx.get(node_id) is None:
                raise NotFoundError(node_id)
            await tx.update_name(node_id, cleaned)
            renamed = await tx.get(node_id)
        if renamed is None:
            raise NotFoundError(node_id)
        return renamed

    async def soft_delete(self, node_id: int) -> None:
        """Stamp ``node_id`` and all of its live descendants with one deletion time.

        An already deleted target is stamped again, along with any descendant
        that was restored underneath it.
        """
        async with self._store.transaction() as tx:
            existing = await tx.get(node_id, include_deleted=True)
            if existing is None:
                raise NotFoundError(node_id)

            ids = await collect_descendant_ids(tx, node_id)
            ids.append(node_id)
            now = datetime.now(timezone.utc)
            await tx.set_deleted_at(ids, now)
        logger.debug("soft_delete id=%s: %d rows", node_id, len(ids))

    async def hard_delete(self, node_id: int) -> None:
        async with self._store.transaction() as tx:
            if await tx.get(node_id, include_deleted=True) is None:
                raise NotFoundError(node_id)
            ids = await collect_descendant_ids(tx, node_id, include_deleted=True)
            ids.append(node_id)
            await tx.delete_many(ids)
        logger.debug("hard_delete id=%s: %d rows", node_id, len(ids))

    async def restore(self, node_id: int) -> HierarchyNode:
        """Clear the deletion stamp on ``node_id`` and its whole subtree."""
        async with self._store.transaction() as tx:
            existing = await tx.get(node_id, include_deleted=True)
            if existing is None:
                raise NotFoundError(node_id)
            if existing.deleted_at is None:
                raise NodeNotDeletedError(node_id)

            ids = await collect_descendant_ids(tx, node_id, include_deleted=True)
            ids.append(node_id)
            await tx.set_deleted_at(ids, None)
            restored = await tx.get(node_id)
        if restored is None:
            raise NotFoundError(node_id)
        logger.debug("restore id=%s: %d rows", node_id, len(ids))
        return restored

    # --- reads ------------------------------------------------------------

    async def get_by_id(self, node_id: int, include_deleted: bool = False) -> HierarchyNode | None:
        return await self._store.get(node_id, include_deleted=include_deleted)

    async def count(self, include_deleted: bool = False) -> int:
        return await self._store.count(include_deleted=include_deleted)

    async def list_children(self, parent_id: int | None) -> list[HierarchyNode]:
        """Direct, non-deleted children: containers first, then by name."""
        return await self._store.list_children(parent_id)

    async def list_container_children(self, parent_id: int | None) -> list[HierarchyNode]:
        return await self._store.list_children(parent_id, containers_only=True)

    async def list_children_page(
        self, parent_id: int | None, limit: int | None = None, cursor: str | None = None
    ) -> CursorPage:
        size = clamp_limit(limit, self.default_page_size, self.max_page_size)
        rows = await self._store.list_children_after(parent_id, size + 1, after_id=decode_cursor(cursor))
        return build_cursor_page(rows, size)

    async def list_all(self, page: int = 1, limit: int | None = None, include_deleted: bool = False) -> OffsetPage:
        size = clamp_limit(limit, self.default_page_size, self.max_page_size)
        page = max(1, page)
        rows = await self._store.list_page((page - 1) * size, size, include_deleted=include_deleted)
        total = await self._store.count(include_deleted=include_deleted)
        return OffsetPage(
            data=rows,
            pagination=Pagination(page=page, limit=size, total=total, total_pages=math.ceil(total / size)),
        )

    async def get_tree(self) -> list[TreeNode]:
        """Top level of the lazy tree: root containers flagged with ``has_children``.

        Child counts come from one batched query over all roots.
        """
        roots = build_tree(await self._store.list_children(None, containers_only=True))
        counts = await self._store.count_children([r.id for r in roots], containers_only=True)
        for root in roots:
            root.has_children = counts.get(root.id, 0) > 0
        return roots

    async def get_full_tree(self) -> list[TreeNode]:
        """Every live container, nested. Only suitable for bounded datasets."""
        return build_tree(await self._store.list_containers())

    async def search(self, query: str, limit: int | None = None) -> list[HierarchyNode]:
        term = (query or "").strip()
        if not term:
            return []
        size = clamp_limit(limit, self.max_search_results, self.max_search_results)
        return await self._store.search(term, size)

    async def search_page(self, query: str, limit: int | None = None, cursor: str | None = None) -> CursorPage:
        term = (query or "").strip()
        if not term:
            return empty_cursor_page()
        size = clamp_limit(limit, self.default_page_size, self.max_search_results)
        rows = await self._store.search_after(term, size + 1, after_id=decode_cursor(cursor))
        return build_cursor_page(rows, size)
