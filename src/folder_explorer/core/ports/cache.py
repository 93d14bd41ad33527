from collections.abc import Awaitable, Callable
from typing import Any, Protocol


class Cache(Protocol):
    """Key/value cache holding JSON-compatible values with a per-key TTL in seconds."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def delete_prefix(self, prefix: str) -> int: ...

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[Any]], ttl: int) -> Any: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
