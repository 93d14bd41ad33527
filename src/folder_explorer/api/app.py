from __future__ import annotations

from fastapi import FastAPI

from folder_explorer.api.errors import register_error_handlers
from folder_explorer.api.lifespan import lifespan
from folder_explorer.api.routes.folders import router as folders_router
from folder_explorer.api.routes.health import router as health_router
from folder_explorer.config import Settings


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Folder Explorer API",
        description="Browse, search and edit a folder hierarchy stored in one table.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings.from_env()

    register_error_handlers(app)

    app.include_router(health_router, include_in_schema=False)
    app.include_router(folders_router)

    return app
