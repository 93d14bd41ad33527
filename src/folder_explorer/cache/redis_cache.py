"""Redis-backed cache that degrades to an in-process map when Redis is unreachable."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from folder_explorer.cache.memory import MemoryCache

logger = logging.getLogger(__name__)

_CONNECTION_ERRORS = (RedisError, OSError)


class RedisCache:
    """Cache-aside store over Redis with a ``MemoryCache`` fallback.

    When a Redis call fails the cache switches to the fallback and retries
    Redis no sooner than ``retry_interval`` seconds later. Invalidations are
    always applied to the fallback too; those Redis missed while it was down
    are replayed against Redis before it is used again, so a recovered Redis
    never serves entries that were invalidated during the outage.
    """

    def __init__(
        self,
        url: str,
        fallback: MemoryCache | None = None,
        retry_interval: float = 30.0,
        client: Any | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._url = url
        self._client = client
        self._fallback = fallback if fallback is not None else MemoryCache()
        self._retry_interval = retry_interval
        self._clock = clock
        self._available = True
        self._retry_at = 0.0
        self._missed_prefixes: set[str] = set()
        self._missed_keys: set[str] = set()

    @property
    def is_redis_available(self) -> bool:
        return self._available

    def _redis(self) -> Any:
        if self._client is None:
            self._client = redis.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return self._client

    def _mark_down(self, operation: str, exc: BaseException) -> None:
        if self._available:
            logger.warning("Redis %s failed, using in-memory fallback: %s", operation, exc)
        self._available = False
        self._retry_at = self._clock() + self._retry_interval

    async def _use_redis(self) -> bool:
        if self._available:
            return True
        if self._clock() < self._retry_at:
            return False
        try:
            client = self._redis()
            await client.ping()
            for prefix in sorted(self._missed_prefixes):
                await self._delete_prefix_redis(client, prefix)
            if self._missed_keys:
                await client.delete(*sorted(self._missed_keys))
        except _CONNECTION_ERRORS as exc:
            self._retry_at = self._clock() + self._retry_interval
            logger.debug("Redis still unavailable: %s", exc)
            return False
        self._missed_prefixes.clear()
        self._missed_keys.clear()
        self._available = True
        logger.info("Redis connection recovered")
        return True

    @staticmethod
    async def _delete_prefix_redis(client: Any, prefix: str) -> int:
        keys = [key async for key in client.scan_iter(match=f"{prefix}*")]
        if not keys:
            return 0
        return int(await client.delete(*keys))

    async def get(self, key: str) -> Any | None:
        if await self._use_redis():
            try:
                raw = await self._redis().get(key)
            except _CONNECTION_ERRORS as exc:
                self._mark_down("get", exc)
            else:
                logger.debug("%s (redis): %s", "HIT" if raw is not None else "MISS", key)
                return json.loads(raw) if raw is not None else None
        return await self._fallback.get(key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        if await self._use_redis():
            try:
                await self._redis().setex(key, ttl, json.dumps(value))
            except _CONNECTION_ERRORS as exc:
                self._mark_down("set", exc)
            else:
                logger.debug("SET (redis): %s (ttl=%ss)", key, ttl)
                return
        await self._fallback.set(key, value, ttl)

    async def delete(self, key: str) -> None:
        await self._fallback.delete(key)
        if await self._use_redis():
            try:
                await self._redis().delete(key)
                return
            except _CONNECTION_ERRORS as exc:
                self._mark_down("delete", exc)
        self._missed_keys.add(key)

    async def delete_prefix(self, prefix: str) -> int:
        removed = await self._fallback.delete_prefix(prefix)
        if await self._use_redis():
            try:
                return removed + await self._delete_prefix_redis(self._redis(), prefix)
            except _CONNECTION_ERRORS as exc:
                self._mark_down("delete_prefix", exc)
        self._missed_prefixes.add(prefix)
        return removed

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[Any]], ttl: int) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await factory()
        await self.set(key, value, ttl)
        return value

    async def ping(self) -> bool:
        try:
            return bool(await self._redis().ping())
        except _CONNECTION_ERRORS:
            return False

    async def close(self) -> None:
        await self._fallback.close()
        if self._client is not None:
            await self._client.aclose()
            self._client = None
