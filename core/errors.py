"""
Domain error taxonomy.

Every error knows the HTTP status and machine-readable code it maps to, so the
boundary in main.py can translate it into the JSON envelope without a lookup table.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class CourseError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def context(self) -> Dict[str, Any]:
        """Extra keys merged into the error envelope."""
        return {}


class CourseValidationError(CourseError):
    status_code = 400
    code = "validation_error"

    def __init__(self, field: str, message: str, received: Any = None):
        super().__init__(message)
        self.field = field
        self.received = received

    def context(self) -> Dict[str, Any]:
        return {"field": self.field, "received": {self.field: self.received}}


class CourseNotFound(CourseError):
    status_code = 404
    code = "not_found"

    def __init__(self, course_id: int):
        super().__init__("Course not found")
        self.course_id = course_id

    def context(self) -> Dict[str, Any]:
        return {"id": self.course_id}


class StorageError(CourseError):
    """Connection or query failure. Never retried automatically."""

    status_code = 500
    code = "storage_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class RenumberingError(StorageError):
    code = "renumbering_failed"
