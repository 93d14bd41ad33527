from folder_explorer.cache.memory import MemoryCache
from folder_explorer.cache.redis_cache import RedisCache
from folder_explorer.config import Settings
from folder_explorer.core.ports.cache import Cache


def build_cache(settings: Settings) -> Cache:
    """Redis with an in-process fallback when ``REDIS_URL`` is set, otherwise the in-process cache alone."""
    fallback = MemoryCache(max_entries=settings.memory_cache_max_entries)
    if not settings.redis_url:
        return fallback
    return RedisCache(settings.redis_url, fallback=fallback, retry_interval=settings.cache_retry_seconds)


__all__ = [
    "Cache",
    "MemoryCache",
    "RedisCache",
    "build_cache",
]
