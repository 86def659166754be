"""Pydantic schemas for encrypted questionnaire assessment."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class EncryptedMetadataPayload(CamelModel):
    timestamp: Optional[str] = Field(default=None, description="Base64 ciphertext of the submission time")
    question_count: Optional[str] = Field(
        default=None, alias="questionCount", description="Base64 ciphertext of the number of answers"
    )


class EncryptedAssessmentRequest(CamelModel):
    """Presence of ``encryptedResponses``/``publicKey`` is checked by the route, not here."""

    encrypted_responses: Optional[List[str]] = Field(
        default=None, alias="encryptedResponses", description="Base64 ciphertexts in question order"
    )
    encrypted_metadata: Optional[EncryptedMetadataPayload] = Field(default=None, alias="encryptedMetadata")
    public_key: Optional[str] = Field(default=None, alias="publicKey", description="Base64 public key")


class EncryptedAssessmentResult(CamelModel):
    encrypted_depression_level: str = Field(..., alias="encryptedDepressionLevel")
    encrypted_confidence_score: str = Field(..., alias="encryptedConfidenceScore")
    processed_at: datetime = Field(..., alias="processedAt")


class ModelInfo(CamelModel):
    version: str
    description: str
    questions_supported: int = Field(..., alias="questionsSupported")
    response_scale: str = Field(..., alias="responseScale")
    output_levels: List[str] = Field(..., alias="outputLevels")
    privacy_features: List[str] = Field(..., alias="privacyFeatures")
    last_updated: datetime = Field(..., alias="lastUpdated")
