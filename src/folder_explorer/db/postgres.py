import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from folder_explorer.core.errors import StorageError
from folder_explorer.core.traversal import chunked
from folder_explorer.db.helpers import TABLE_NAME, contains_pattern
from folder_explorer.models import MAX_NODE_ID, HierarchyNode

logger = logging.getLogger(__name__)

_BATCH_SIZE = 500

_COLUMNS = "id, name, parent_id, is_container, created_at, updated_at, deleted_at"
_CHILD_ORDER = "ORDER BY is_container DESC, name, id"


@asynccontextmanager
async def _use_conn(engine: AsyncEngine, conn: AsyncConnection | None = None) -> AsyncIterator[AsyncConnection]:
    """Yield an existing connection or open a new transactional one."""
    if conn is not None:
        yield conn
    else:
        async with engine.begin() as new_conn:
            yield new_conn


@asynccontextmanager
async def _storage_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.exception("%s on %s failed", operation, TABLE_NAME)
        raise StorageError(operation, entity="folder", cause=exc) from exc


def _to_node(row: Any) -> HierarchyNode:
    return HierarchyNode.model_validate(dict(row._mapping))


def _in_id_range(node_id: int | None) -> bool:
    return node_id is None or 0 <= node_id <= MAX_NODE_ID


def _parent_clause(parent_id: int | None) -> tuple[str, dict[str, Any]]:
    if parent_id is None:
        return "parent_id IS NULL", {}
    return "parent_id = :parent_id", {"parent_id": parent_id}


class PostgresEntityStore:
    """``EntityStore`` over the ``folders`` table.

    A store bound to a connection (see ``transaction``) runs every statement
    on that connection; an unbound store opens a short transaction per call.
    """

    def __init__(self, engine: AsyncEngine, conn: AsyncConnection | None = None) -> None:
        self._engine = engine
        self._conn = conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["PostgresEntityStore"]:
        if self._conn is not None:
            yield self
            return
        async with _storage_errors("transaction"), self._engine.begin() as conn:
            yield PostgresEntityStore(self._engine, conn=conn)

    async def _fetch(self, operation: str, sql: Any, params: dict[str, Any]) -> list[Any]:
        async with _storage_errors(operation), _use_conn(self._engine, self._conn) as conn:
            result = await conn.execute(sql, params)
            return list(result.fetchall())

    async def get(self, node_id: int, include_deleted: bool = False) -> HierarchyNode | None:
        if not _in_id_range(node_id):
            return None
        deleted = "" if include_deleted else " AND deleted_at IS NULL"
        rows = await self._fetch(
            "get",
            text(f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE id = :id{deleted} LIMIT 1"),
            {"id": node_id},
        )
        return _to_node(rows[0]) if rows else None

    async def insert(self, name: str, parent_id: int | None, is_container: bool) -> int:
        rows = await self._fetch(
            "insert",
            text(
                f"INSERT INTO {TABLE_NAME} (name, parent_id, is_container) "
                "VALUES (:name, :parent_id, :is_container) RETURNING id"
            ),
            {"name": name, "parent_id": parent_id, "is_container": is_container},
        )
        return int(rows[0][0])

    async def update_name(self, node_id: int, name: str) -> int:
        async with _storage_errors("update_name"), _use_conn(self._engine, self._conn) as conn:
            result = await conn.execute(
                text(f"UPDATE {TABLE_NAME} SET name = :name, updated_at = now() WHERE id = :id"),
                {"name": name, "id": node_id},
            )
            return int(result.rowcount)

    async def set_deleted_at(self, node_ids: Sequence[int], deleted_at: datetime | None) -> int:
        if not node_ids:
            return 0
        sql = text(
            f"UPDATE {TABLE_NAME} SET deleted_at = :deleted_at, updated_at = now() WHERE id IN :ids"
        ).bindparams(bindparam("ids", expanding=True))
        changed = 0
        async with _storage_errors("set_deleted_at"), _use_conn(self._engine, self._conn) as conn:
            for chunk in chunked(node_ids, _BATCH_SIZE):
                result = await conn.execute(sql, {"deleted_at": deleted_at, "ids": list(chunk)})
                changed += int(result.rowcount)
        return changed

    async def delete_many(self, node_ids: Sequence[int]) -> int:
        if not node_ids:
            return 0
        sql = text(f"DELETE FROM {TABLE_NAME} WHERE id IN :ids").bindparams(bindparam("ids", expanding=True))
        removed = 0
        async with _storage_errors("delete_many"), _use_conn(self._engine, self._conn) as conn:
            for chunk in chunked(node_ids, _BATCH_SIZE):
                result = await conn.execute(sql, {"ids": list(chunk)})
                removed += int(result.rowcount)
        return removed

    async def count(self, include_deleted: bool = False) -> int:
        where = "" if include_deleted else " WHERE deleted_at IS NULL"
        rows = await self._fetch("count", text(f"SELECT count(*) FROM {TABLE_NAME}{where}"), {})
        return int(rows[0][0]) if rows else 0

    async def child_ids(self, parent_ids: Sequence[int], include_deleted: bool = False) -> list[int]:
        if not parent_ids:
            return []
        deleted = "" if include_deleted else " AND deleted_at IS NULL"
        sql = text(f"SELECT id FROM {TABLE_NAME} WHERE parent_id IN :ids{deleted}").bindparams(
            bindparam("ids", expanding=True)
        )
        rows = await self._fetch("child_ids", sql, {"ids": list(parent_ids)})
        return [int(row[0]) for row in rows]

    async def count_children(self, parent_ids: Sequence[int], containers_only: bool = False) -> dict[int, int]:
        if not parent_ids:
            return {}
        containers = " AND is_container" if containers_only else ""
        sql = text(
            f"SELECT parent_id, count(*) FROM {TABLE_NAME} "
            f"WHERE parent_id IN :ids AND deleted_at IS NULL{containers} GROUP BY parent_id"
        ).bindparams(bindparam("ids", expanding=True))
        counts: dict[int, int] = {}
        for chunk in chunked(parent_ids, _BATCH_SIZE):
            rows = await self._fetch("count_children", sql, {"ids": list(chunk)})
            counts.update({int(r[0]): int(r[1]) for r in rows})
        return counts

    async def list_children(self, parent_id: int | None, containers_only: bool = False) -> list[HierarchyNode]:
        if not _in_id_range(parent_id):
            return []
        parent, params = _parent_clause(parent_id)
        containers = " AND is_container" if containers_only else ""
        rows = await self._fetch(
            "list_children",
            text(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} "
                f"WHERE {parent} AND deleted_at IS NULL{containers} {_CHILD_ORDER}"
            ),
            params,
        )
        return [_to_node(r) for r in rows]

    async def list_children_after(
        self, parent_id: int | None, limit: int, after_id: int | None = None
    ) -> list[HierarchyNode]:
        if not (_in_id_range(parent_id) and _in_id_range(after_id)):
            return []
        parent, params = _parent_clause(parent_id)
        params["lim"] = limit
        after = ""
        if after_id is not None:
            after = " AND id > :after_id"
            params["after_id"] = after_id
        rows = await self._fetch(
            "list_children_after",
            text(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} "
                f"WHERE {parent} AND deleted_at IS NULL{after} ORDER BY id LIMIT :lim"
            ),
            params,
        )
        return [_to_node(r) for r in rows]

    async def list_containers(self) -> list[HierarchyNode]:
        rows = await self._fetch(
            "list_containers",
            text(f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE is_container AND deleted_at IS NULL ORDER BY name, id"),
            {},
        )
        return [_to_node(r) for r in rows]

    async def list_page(self, offset: int, limit: int, include_deleted: bool = False) -> list[HierarchyNode]:
        where = "" if include_deleted else " WHERE deleted_at IS NULL"
        rows = await self._fetch(
            "list_page",
            text(f"SELECT {_COLUMNS} FROM {TABLE_NAME}{where} {_CHILD_ORDER} LIMIT :lim OFFSET :off"),
            {"lim": limit, "off": offset},
        )
        return [_to_node(r) for r in rows]

    async def search(self, query: str, limit: int) -> list[HierarchyNode]:
        rows = await self._fetch(
            "search",
            text(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} "
                f"WHERE name LIKE :pattern ESCAPE '\\' AND deleted_at IS NULL {_CHILD_ORDER} LIMIT :lim"
            ),
            {"pattern": contains_pattern(query), "lim": limit},
        )
        return [_to_node(r) for r in rows]

    async def search_after(self, query: str, limit: int, after_id: int | None = None) -> list[HierarchyNode]:
        if not _in_id_range(after_id):
            return []
        params: dict[str, Any] = {"pattern": contains_pattern(query), "lim": limit}
        after = ""
        if after_id is not None:
            after = " AND id > :after_id"
            params["after_id"] = after_id
        rows = await self._fetch(
            "search_after",
            text(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} "
                f"WHERE name LIKE :pattern ESCAPE '\\' AND deleted_at IS NULL{after} ORDER BY id LIMIT :lim"
            ),
            params,
        )
        return [_to_node(r) for r in rows]

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
