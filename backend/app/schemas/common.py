"""Common/shared schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every JSON endpoint."""

    success: bool = True
    message: str = "Success"
    status: int = 200
    data: Optional[T] = None


def failure(message: str, status: int, error: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message, "status": status}
    if error is not None:
        body["error"] = error
    return body


class HealthStatus(CamelModel):
    status: str = "healthy"
    ml_processor_initialized: bool = Field(False, alias="mlProcessorInitialized")
    timestamp: datetime


class InitializeStatus(BaseModel):
    initialized: bool = True
