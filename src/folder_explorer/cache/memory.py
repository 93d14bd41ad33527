import json
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    payload: str
    expires_at: float


class MemoryCache:
    """Bounded in-process cache with per-entry TTL.

    Values are stored JSON-encoded so every ``get`` hands out a fresh copy.
    Least recently used entries are evicted past ``max_entries``; expired
    entries are dropped lazily on read and by a sweep every ``sweep_interval``
    seconds. No method awaits while touching the map, so concurrent tasks on
    one event loop cannot interleave inside an update.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        sweep_interval: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._max_entries = max_entries
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._entries)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("swept %d expired entries", len(expired))

    async def get(self, key: str) -> Any | None:
        now = self._clock()
        self._maybe_sweep(now)
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("MISS (memory): %s", key)
            return None
        if entry.expires_at <= now:
            del self._entries[key]
            logger.debug("EXPIRED (memory): %s", key)
            return None
        self._entries.move_to_end(key)
        logger.debug("HIT (memory): %s", key)
        return json.loads(entry.payload)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        now = self._clock()
        self._maybe_sweep(now)
        self._entries[key] = _Entry(payload=json.dumps(value), expires_at=now + ttl)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        logger.debug("SET (memory): %s (ttl=%ss)", key, ttl)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self._entries if k.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[Any]], ttl: int) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await factory()
        await self.set(key, value, ttl)
        return value

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()
