import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from folder_explorer.models import HierarchyNode


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _child_order(node: HierarchyNode) -> tuple[bool, str, int]:
    return (not node.is_container, node.name, node.id)


class InMemoryEntityStore:
    """Dict-backed ``EntityStore``.

    ``transaction()`` works on a private copy of the rows and swaps it in on a
    clean exit, so readers of the parent store never see a half-applied batch.
    Writers are serialised by a lock held for the lifetime of the transaction.
    """

    def __init__(self) -> None:
        self.rows: dict[int, HierarchyNode] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        self._in_transaction = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["InMemoryEntityStore"]:
        if self._in_transaction:
            yield self
            return
        async with self._lock:
            staged = InMemoryEntityStore()
            staged.rows = dict(self.rows)
            staged._next_id = self._next_id
            staged._in_transaction = True
            yield staged
            self.rows = staged.rows
            self._next_id = staged._next_id

    def _visible(self, include_deleted: bool) -> list[HierarchyNode]:
        return [n for n in self.rows.values() if include_deleted or n.deleted_at is None]

    async def get(self, node_id: int, include_deleted: bool = False) -> HierarchyNode | None:
        node = self.rows.get(node_id)
        if node is None or (node.deleted_at is not None and not include_deleted):
            return None
        return node

    async def insert(self, name: str, parent_id: int | None, is_container: bool) -> int:
        node_id = self._next_id
        self._next_id += 1
        now = _utcnow()
        self.rows[node_id] = HierarchyNode(
            id=node_id,
            name=name,
            parent_id=parent_id,
            is_container=is_container,
            created_at=now,
            updated_at=now,
        )
        return node_id

    async def update_name(self, node_id: int, name: str) -> int:
        node = self.rows.get(node_id)
        if node is None:
            return 0
        self.rows[node_id] = node.model_copy(update={"name": name, "updated_at": _utcnow()})
        return 1

    async def set_deleted_at(self, node_ids: Sequence[int], deleted_at: datetime | None) -> int:
        now = _utcnow()
        changed = 0
        for node_id in node_ids:
            node = self.rows.get(node_id)
            if node is None:
                continue
            self.rows[node_id] = node.model_copy(update={"deleted_at": deleted_at, "updated_at": now})
            changed += 1
        return changed

    async def delete_many(self, node_ids: Sequence[int]) -> int:
        removed = 0
        for node_id in node_ids:
            if self.rows.pop(node_id, None) is not None:
                removed += 1
        return removed

    async def count(self, include_deleted: bool = False) -> int:
        return len(self._visible(include_deleted))

    async def child_ids(self, parent_ids: Sequence[int], include_deleted: bool = False) -> list[int]:
        wanted = set(parent_ids)
        return [n.id for n in self._visible(include_deleted) if n.parent_id in wanted]

    async def count_children(self, parent_ids: Sequence[int], containers_only: bool = False) -> dict[int, int]:
        wanted = set(parent_ids)
        counts: dict[int, int] = {}
        for node in self._visible(False):
            if node.parent_id in wanted and (node.is_container or not containers_only):
                counts[node.parent_id] = counts.get(node.parent_id, 0) + 1
        return counts

    async def list_children(self, parent_id: int | None, containers_only: bool = False) -> list[HierarchyNode]:
        children = [
            n
            for n in self._visible(False)
            if n.parent_id == parent_id and (n.is_container or not containers_only)
        ]
        return sorted(children, key=_child_order)

    async def list_children_after(
        self, parent_id: int | None, limit: int, after_id: int | None = None
    ) -> list[HierarchyNode]:
        children = sorted(
            (
                n
                for n in self._visible(False)
                if n.parent_id == parent_id and (after_id is None or n.id > after_id)
            ),
            key=lambda n: n.id,
        )
        return children[:limit]

    async def list_containers(self) -> list[HierarchyNode]:
        return sorted((n for n in self._visible(False) if n.is_container), key=lambda n: (n.name, n.id))

    async def list_page(self, offset: int, limit: int, include_deleted: bool = False) -> list[HierarchyNode]:
        ordered = sorted(self._visible(include_deleted), key=_child_order)
        return ordered[offset : offset + limit]

    async def search(self, query: str, limit: int) -> list[HierarchyNode]:
        matches = [n for n in self._visible(False) if query in n.name]
        return sorted(matches, key=_child_order)[:limit]

    async def search_after(self, query: str, limit: int, after_id: int | None = None) -> list[HierarchyNode]:
        matches = sorted(
            (n for n in self._visible(False) if query in n.name and (after_id is None or n.id > after_id)),
            key=lambda n: n.id,
        )
        return matches[:limit]

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        pass
