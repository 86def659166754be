"""Encrypted assessment and model metadata routes."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.schemas.assessment import EncryptedAssessmentRequest, EncryptedAssessmentResult, ModelInfo
from app.schemas.common import ApiResponse, InitializeStatus, failure
from app.services.he_service import HEAssessmentEngine

router = APIRouter(tags=["assessment"])


def get_he_engine(request: Request) -> HEAssessmentEngine:
    return request.app.state.he_engine


@router.post("/assess-encrypted", response_model=ApiResponse[EncryptedAssessmentResult])
def assess_encrypted(
    payload: EncryptedAssessmentRequest,
    he_engine: HEAssessmentEngine = Depends(get_he_engine),
):
    if not payload.encrypted_responses or not payload.public_key:
        return JSONResponse(
            status_code=400,
            content=failure("Missing required fields: encryptedResponses, publicKey", 400),
        )
    metadata = payload.encrypted_metadata.model_dump(by_alias=True) if payload.encrypted_metadata else None
    result = he_engine.run_encrypted_assessment(
        encrypted_responses=payload.encrypted_responses,
        public_key_b64=payload.public_key,
        encrypted_metadata=metadata,
    )
    return ApiResponse(
        data=EncryptedAssessmentResult.model_validate(result),
        message="Encrypted assessment processed successfully",
    )


@router.get("/model-info", response_model=ApiResponse[ModelInfo])
def model_info(he_engine: HEAssessmentEngine = Depends(get_he_engine)) -> ApiResponse[ModelInfo]:
    metadata = he_engine.model.public_metadata()
    metadata["lastUpdated"] = datetime.now(timezone.utc)
    return ApiResponse(data=ModelInfo.model_validate(metadata), message="Model information retrieved")


@router.post("/initialize", response_model=ApiResponse[InitializeStatus])
def initialize(he_engine: HEAssessmentEngine = Depends(get_he_engine)) -> ApiResponse[InitializeStatus]:
    he_engine.initialize()
    return ApiResponse(
        data=InitializeStatus(initialized=he_engine.is_initialized),
        message="ML processor initialized successfully",
    )
