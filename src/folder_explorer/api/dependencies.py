from __future__ import annotations

from fastapi import Request

from folder_explorer.core.cached import CachedHierarchyRepository
from folder_explorer.core.ports.cache import Cache
from folder_explorer.core.ports.store import EntityStore


def get_repository(request: Request) -> CachedHierarchyRepository:
    """The cached repository built by the application lifespan."""
    repository: CachedHierarchyRepository = request.app.state.repository
    return repository


def get_store(request: Request) -> EntityStore:
    store: EntityStore = request.app.state.store
    return store


def get_cache(request: Request) -> Cache:
    cache: Cache = request.app.state.cache
    return cache
