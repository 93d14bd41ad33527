"""Failure taxonomy raised by the hierarchy core.

Every error carries a stable ``code`` and a ``status_code`` hint so that the
HTTP layer can map it without inspecting messages.
"""

from __future__ import annotations

from typing import Any


class HierarchyError(Exception):
    code = "HIERARCHY_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(HierarchyError):
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(HierarchyError):
    code = "FOLDER_NOT_FOUND"
    status_code = 404

    def __init__(self, node_id: int | None = None, details: dict[str, Any] | None = None) -> None:
        message = f"Folder with id {node_id} not found" if node_id is not None else "Folder not found"
        super().__init__(message, details={"id": node_id, **(details or {})})
        self.node_id = node_id


class BusinessRuleError(HierarchyError):
    code = "BUSINESS_RULE_VIOLATION"
    status_code = 422


class ParentNotContainerError(BusinessRuleError):
    code = "PARENT_NOT_CONTAINER"

    def __init__(self, parent_id: int) -> None:
        super().__init__("Parent must be a folder, not a file", details={"parentId": parent_id})
        self.parent_id = parent_id


class NodeNotDeletedError(BusinessRuleError):
    code = "FOLDER_NOT_DELETED"

    def __init__(self, node_id: int) -> None:
        super().__init__("Cannot restore a folder that is not deleted", details={"id": node_id})
        self.node_id = node_id


class CreationFailedError(HierarchyError):
    """The row was inserted but could not be read back."""

    code = "FOLDER_CREATION_FAILED"


class StorageError(HierarchyError):
    code = "DATABASE_ERROR"

    def __init__(self, operation: str, entity: str = "folder", cause: BaseException | None = None) -> None:
        super().__init__(
            f"Database error during {operation}",
            details={"operation": operation, "entity": entity},
        )
        self.operation = operation
        self.entity = entity
        self.cause = cause
