"""Construction of the store, cache and repository from ``Settings``.

Nothing here is cached at module level; the API lifespan and each CLI command
build their own instances and dispose of them when done.
"""

from folder_explorer.cache import build_cache
from folder_explorer.config import Settings
from folder_explorer.core.cached import CachedHierarchyRepository
from folder_explorer.core.ports.cache import Cache
from folder_explorer.core.ports.store import EntityStore
from folder_explorer.core.repository import HierarchyRepository
from folder_explorer.db.engine import get_engine
from folder_explorer.db.memory import InMemoryEntityStore
from folder_explorer.db.postgres import PostgresEntityStore

MEMORY_URL_SCHEME = "memory://"


def build_store(settings: Settings) -> EntityStore:
    if settings.database_url.startswith(MEMORY_URL_SCHEME):
        return InMemoryEntityStore()
    return PostgresEntityStore(get_engine(settings.database_url, pool_size=settings.db_pool_size))


def build_repository(store: EntityStore, settings: Settings) -> HierarchyRepository:
    return HierarchyRepository(
        store,
        default_page_size=settings.page_size_default,
        max_page_size=settings.page_size_max,
        max_search_results=settings.search_results_max,
    )


def build_cached_repository(store: EntityStore, cache: Cache, settings: Settings) -> CachedHierarchyRepository:
    return CachedHierarchyRepository(
        build_repository(store, settings),
        cache,
        tree_ttl=settings.cache_ttl_tree,
        children_ttl=settings.cache_ttl_children,
        search_ttl=settings.cache_ttl_search,
    )


__all__ = [
    "MEMORY_URL_SCHEME",
    "build_cache",
    "build_cached_repository",
    "build_repository",
    "build_store",
]
