from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

MAX_NAME_LENGTH = 255
# ids are a Postgres serial (int4)
MAX_NODE_ID = 2**31 - 1


class _WireModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class HierarchyNode(_WireModel):
    id: int
    name: str
    parent_id: int | None = None
    is_container: bool = True
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class TreeNode(HierarchyNode):
    children: list["TreeNode"] = []
    has_children: bool = False


TreeNode.model_rebuild()  # necessary for recursive types


class CursorInfo(_WireModel):
    next: str | None = None
    has_more: bool = False


class CursorPage(_WireModel):
    data: list[HierarchyNode]
    cursor: CursorInfo


class Pagination(_WireModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OffsetPage(_WireModel):
    data: list[HierarchyNode]
    pagination: Pagination
