"""Cache-aside wrapper around ``HierarchyRepository``.

Reads that back the explorer UI (tree, children, search) go through the
cache; every successful write drops the whole ``folder:`` key space.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import TypeAdapter

from folder_explorer.core.pagination import empty_cursor_page
from folder_explorer.core.ports.cache import Cache
from folder_explorer.core.repository import HierarchyRepository
from folder_explorer.models import CursorPage, HierarchyNode, OffsetPage, TreeNode

logger = logging.getLogger(__name__)

KEY_PREFIX = "folder:"

_NODES = TypeAdapter(list[HierarchyNode])
_TREE = TypeAdapter(list[TreeNode])
_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def _parent_key(parent_id: int | None) -> str:
    return "root" if parent_id is None else str(parent_id)


def _limit_key(limit: int | None) -> str:
    return "default" if limit is None else str(limit)


def _query_key(query: str) -> str:
    """Readable slug plus a digest of the exact query, so case variants never share an entry."""
    slug = _SLUG_CHARS.sub("_", query.lower()).strip("_")[:40] or "_"
    digest = hashlib.sha1(query.encode()).hexdigest()[:12]
    return f"{slug}:{digest}"


def tree_key() -> str:
    return f"{KEY_PREFIX}tree"


def full_tree_key() -> str:
    return f"{KEY_PREFIX}tree:full"


def children_key(parent_id: int | None, containers_only: bool = False) -> str:
    suffix = ":containers" if containers_only else ""
    return f"{KEY_PREFIX}children:{_parent_key(parent_id)}{suffix}"


def children_page_key(parent_id: int | None, cursor: str | None, limit: int | None) -> str:
    return f"{KEY_PREFIX}children:{_parent_key(parent_id)}:cursor:{cursor or 'first'}:{_limit_key(limit)}"


def search_key(query: str, limit: int | None) -> str:
    return f"{KEY_PREFIX}search:basic:{_query_key(query)}:{_limit_key(limit)}"


def search_page_key(query: str, cursor: str | None, limit: int | None) -> str:
    return f"{KEY_PREFIX}search:cursor:{_query_key(query)}:{cursor or 'first'}:{_limit_key(limit)}"


class CachedHierarchyRepository:
    """Same operations as ``HierarchyRepository``; cached reads, invalidating writes."""

    def __init__(
        self,
        inner: HierarchyRepository,
        cache: Cache,
        tree_ttl: int = 300,
        children_ttl: int = 300,
        search_ttl: int = 180,
    ) -> None:
        self._inner = inner
        self._cache = cache
        self.tree_ttl = tree_ttl
        self.children_ttl = children_ttl
        self.search_ttl = search_ttl

    async def _cached(
        self,
        key: str,
        ttl: int,
        load: Callable[[], Awaitable[Any]],
        dump: Callable[[Any], Any],
        parse: Callable[[Any], Any],
    ) -> Any:
        async def produce() -> Any:
            return dump(await load())

        return parse(await self._cache.get_or_set(key, produce, ttl))

    async def _invalidate(self) -> None:
        removed = await self._cache.delete_prefix(KEY_PREFIX)
        logger.debug("invalidated %d cached entries", removed)

    # --- writes -----------------------------------------------------------

    async def create(self, name: str, parent_id: int | None = None, is_container: bool = True) -> HierarchyNode:
        node = await self._inner.create(name, parent_id=parent_id, is_container=is_container)
        await self._invalidate()
        return node

    async def rename(self, node_id: int, name: str) -> HierarchyNode:
        node = await self._inner.rename(node_id, name)
        await self._invalidate()
        return node

    async def soft_delete(self, node_id: int) -> None:
        await self._inner.soft_delete(node_id)
        await self._invalidate()

    async def hard_delete(self, node_id: int) -> None:
        await self._inner.hard_delete(node_id)
        await self._invalidate()

    async def restore(self, node_id: int) -> HierarchyNode:
        node = await self._inner.restore(node_id)
        await self._invalidate()
        return node

    # --- pass-through reads -----------------------------------------------

    async def get_by_id(self, node_id: int, include_deleted: bool = False) -> HierarchyNode | None:
        return await self._inner.get_by_id(node_id, include_deleted=include_deleted)

    async def count(self, include_deleted: bool = False) -> int:
        return await self._inner.count(include_deleted=include_deleted)

    async def list_all(self, page: int = 1, limit: int | None = None, include_deleted: bool = False) -> OffsetPage:
        return await self._inner.list_all(page=page, limit=limit, include_deleted=include_deleted)

    # --- cached reads -----------------------------------------------------

    async def get_tree(self) -> list[TreeNode]:
        return await self._cached(
            tree_key(),
            self.tree_ttl,
            self._inner.get_tree,
            lambda v: _TREE.dump_python(v, mode="json"),
            _TREE.validate_python,
        )

    async def get_full_tree(self) -> list[TreeNode]:
        return await self._cached(
            full_tree_key(),
            self.tree_ttl,
            self._inner.get_full_tree,
            lambda v: _TREE.dump_python(v, mode="json"),
            _TREE.validate_python,
        )

    async def list_children(self, parent_id: int | None) -> list[HierarchyNode]:
        return await self._cached(
            children_key(parent_id),
            self.children_ttl,
            lambda: self._inner.list_children(parent_id),
            lambda v: _NODES.dump_python(v, mode="json"),
            _NODES.validate_python,
        )

    async def list_container_children(self, parent_id: int | None) -> list[HierarchyNode]:
        return await self._cached(
            children_key(parent_id, containers_only=True),
            self.children_ttl,
            lambda: self._inner.list_container_children(parent_id),
            lambda v: _NODES.dump_python(v, mode="json"),
            _NODES.validate_python,
        )

    async def list_children_page(
        self, parent_id: int | None, limit: int | None = None, cursor: str | None = None
    ) -> CursorPage:
        return await self._cached(
            children_page_key(parent_id, cursor, limit),
            self.children_ttl,
            lambda: self._inner.list_children_page(parent_id, limit=limit, cursor=cursor),
            lambda v: v.model_dump(mode="json"),
            CursorPage.model_validate,
        )

    async def search(self, query: str, limit: int | None = None) -> list[HierarchyNode]:
        term = (query or "").strip()
        if not term:
            return []
        return await self._cached(
            search_key(term, limit),
            self.search_ttl,
            lambda: self._inner.search(term, limit=limit),
            lambda v: _NODES.dump_python(v, mode="json"),
            _NODES.validate_python,
        )

    async def search_page(self, query: str, limit: int | None = None, cursor: str | None = None) -> CursorPage:
        term = (query or "").strip()
        if not term:
            return empty_cursor_page()
        return await self._cached(
            search_page_key(term, cursor, limit),
            self.search_ttl,
            lambda: self._inner.search_page(term, limit=limit, cursor=cursor),
            lambda v: v.model_dump(mode="json"),
            CursorPage.model_validate,
        )
