"""Data exchanged between the client and the scoring service."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from fhe_core.codec import decode_text, encode_bytes
from fhe_core.errors import TransportError

if TYPE_CHECKING:
    from fhe_core.ciphertext import Ciphertext, HomomorphicScheme


@dataclass(frozen=True)
class KeyPair:
    """Public/private key material for one client installation."""

    public_key: bytes
    private_key: bytes = field(repr=False)


@dataclass
class EncryptedMetadata:
    timestamp: Optional["Ciphertext"] = None
    question_count: Optional["Ciphertext"] = None


@dataclass
class EncryptedQuestionnaire:
    """One submission: encrypted answers in question order plus the public key."""

    encrypted_responses: List["Ciphertext"]
    public_key: bytes
    encrypted_metadata: EncryptedMetadata = field(default_factory=EncryptedMetadata)

    def to_wire(self) -> Dict[str, Any]:
        """JSON body for ``POST /assess-encrypted``."""
        metadata = self.encrypted_metadata
        return {
            "encryptedResponses": [encode_bytes(ct.serialize()) for ct in self.encrypted_responses],
            "encryptedMetadata": {
                "timestamp": encode_bytes(metadata.timestamp.serialize()) if metadata.timestamp else "",
                "questionCount": encode_bytes(metadata.question_count.serialize()) if metadata.question_count else "",
            },
            "publicKey": encode_bytes(self.public_key),
        }

    @classmethod
    def from_wire(
        cls,
        scheme: "HomomorphicScheme",
        encrypted_responses: List[str],
        public_key_b64: str,
        metadata: Optional[Dict[str, Optional[str]]] = None,
    ) -> "EncryptedQuestionnaire":
        public_key = decode_text(public_key_b64)
        if not public_key:
            raise TransportError("Public key is empty")
        responses = [scheme.deserialize(decode_text(item), public_key) for item in encrypted_responses]
        metadata = metadata or {}

        def _optional(name: str) -> Optional["Ciphertext"]:
            raw = decode_text(metadata.get(name))
            return scheme.deserialize(raw, public_key) if raw else None

        return cls(
            encrypted_responses=responses,
            public_key=public_key,
            encrypted_metadata=EncryptedMetadata(
                timestamp=_optional("timestamp"),
                question_count=_optional("questionCount"),
            ),
        )


@dataclass
class Prediction:
    """Encrypted output of the scoring engine."""

    encrypted_level: "Ciphertext"
    encrypted_confidence: "Ciphertext"

    def to_wire(self, processed_at: Optional[datetime] = None) -> Dict[str, str]:
        processed_at = processed_at or datetime.now(timezone.utc)
        return {
            "encryptedDepressionLevel": encode_bytes(self.encrypted_level.serialize()),
            "encryptedConfidenceScore": encode_bytes(self.encrypted_confidence.serialize()),
            "processedAt": processed_at.isoformat(),
        }

    @classmethod
    def from_wire(cls, scheme: "HomomorphicScheme", data: Dict[str, Any], public_key: bytes) -> "Prediction":
        try:
            level_b64 = data["encryptedDepressionLevel"]
            confidence_b64 = data["encryptedConfidenceScore"]
        except (KeyError, TypeError) as exc:
            raise TransportError("Malformed prediction payload") from exc
        return cls(
            encrypted_level=scheme.deserialize(decode_text(level_b64), public_key),
            encrypted_confidence=scheme.deserialize(decode_text(confidence_b64), public_key),
        )


@dataclass(frozen=True)
class AssessmentResult:
    """Decrypted, human-readable classification."""

    label: str
    confidence: int
    ordinal: int


__all__ = [
    "KeyPair",
    "EncryptedMetadata",
    "EncryptedQuestionnaire",
    "Prediction",
    "AssessmentResult",
]
