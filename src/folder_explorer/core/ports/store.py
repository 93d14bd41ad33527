from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol

from folder_explorer.models import HierarchyNode


class EntityStore(Protocol):
    def transaction(self) -> AbstractAsyncContextManager["EntityStore"]: ...

    async def get(self, node_id: int, include_deleted: bool = False) -> HierarchyNode | None: ...

    async def insert(self, name: str, parent_id: int | None, is_container: bool) -> int: ...

    async def update_name(self, node_id: int, name: str) -> int: ...

    async def set_deleted_at(self, node_ids: Sequence[int], deleted_at: datetime | None) -> int: ...

    async def delete_many(self, node_ids: Sequence[int]) -> int: ...

    async def count(self, include_deleted: bool = False) -> int: ...

    async def child_ids(self, parent_ids: Sequence[int], include_deleted: bool = False) -> list[int]: ...

    async def count_children(self, parent_ids: Sequence[int], containers_only: bool = False) -> dict[int, int]: ...

    async def list_children(self, parent_id: int | None, containers_only: bool = False) -> list[HierarchyNode]: ...

    async def list_children_after(
        self, parent_id: int | None, limit: int, after_id: int | None = None
    ) -> list[HierarchyNode]: ...

    async def list_containers(self) -> list[HierarchyNode]: ...

    async def list_page(self, offset: int, limit: int, include_deleted: bool = False) -> list[HierarchyNode]: ...

    async def search(self, query: str, limit: int) -> list[HierarchyNode]: ...

    async def search_after(self, query: str, limit: int, after_id: int | None = None) -> list[HierarchyNode]: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...
