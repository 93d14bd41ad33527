from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from folder_explorer.config import Settings
from folder_explorer.services import build_cache, build_cached_repository, build_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = getattr(app.state, "settings", None) or Settings.from_env()
    store = build_store(settings)
    cache = build_cache(settings)
    app.state.store = store
    app.state.cache = cache
    app.state.repository = build_cached_repository(store, cache, settings)
    logger.info("Folder explorer API started (cache: %s)", type(cache).__name__)
    try:
        yield
    finally:
        await cache.close()
        await store.dispose()
