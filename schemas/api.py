"""
API envelope schemas.

- ApiResponse wraps every mutation result so clients can rely on `request_id`, `success`
  and `message` regardless of what `data` carries.
- ErrorResponse documents the failure envelope produced by the handlers in main.py.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Generic success wrapper used by the create/update/delete/reset endpoints."""
    request_id: str
    success: bool = True
    message: str
    data: T


class ErrorResponse(BaseModel):
    error: str
    code: str
    success: bool = False
    request_id: Optional[str] = None
    details: Optional[str] = Field(default=None, description="Driver error text; only in development posture")

    model_config = ConfigDict(extra="allow")


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime
    uptime: float = Field(description="Seconds since the process started serving")


class ConnectionCheck(BaseModel):
    success: bool
    time: Any = None
    version: Optional[str] = None
    message: str
