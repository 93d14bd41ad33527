from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FolderCreate(_CamelRequest):
    """POST /api/v1/folders body. Name rules are enforced by the repository."""

    name: str
    parent_id: int | None = None
    is_container: bool = True


class FolderUpdate(_CamelRequest):
    name: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    database: str = "up"
    cache: str = "up"
