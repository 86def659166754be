"""Health check endpoints."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.schemas.common import ApiResponse, HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=ApiResponse[HealthStatus])
def health(request: Request) -> ApiResponse[HealthStatus]:
    status = HealthStatus(
        ml_processor_initialized=request.app.state.he_engine.is_initialized,
        timestamp=datetime.now(timezone.utc),
    )
    return ApiResponse(data=status, message="ML service is healthy")
