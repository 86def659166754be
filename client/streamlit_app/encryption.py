"""Client-side encryption of answers and decryption of the server's prediction."""
from __future__ import annotations

import time
from typing import Optional, Sequence

import numpy as np

from fhe_core.ciphertext import Ciphertext, HomomorphicScheme
from fhe_core.domains import COUNT_DOMAIN, RESPONSE_DOMAIN, ValueDomain, timestamp_from_limbs, timestamp_limbs
from fhe_core.model import DEFAULT_MODEL, LinearModel
from fhe_core.protocol import AssessmentResult, EncryptedMetadata, EncryptedQuestionnaire, Prediction


class Encryptor:
    """Validates plaintext values and encrypts them under the public key.

    Every value is replicated over ``model.lanes`` slots so the server can
    compare it against all thresholds at once.
    """

    def __init__(self, scheme: HomomorphicScheme, model: LinearModel = DEFAULT_MODEL) -> None:
        self.scheme = scheme
        self.model = model

    def encrypt(self, value: object, public_key: bytes, domain: ValueDomain = RESPONSE_DOMAIN) -> Ciphertext:
        checked = domain.validate(value)
        return self.scheme.encrypt(checked, public_key, lanes=self.model.lanes)

    def encrypt_questionnaire(
        self,
        responses: Sequence[object],
        public_key: bytes,
        timestamp: Optional[int] = None,
        question_count: Optional[int] = None,
    ) -> EncryptedQuestionnaire:
        # Validate everything before spending time on encryption.
        values = [RESPONSE_DOMAIN.validate(value) for value in responses]
        limbs = timestamp_limbs(int(time.time()) if timestamp is None else timestamp)
        question_count = len(values) if question_count is None else question_count
        return EncryptedQuestionnaire(
            encrypted_responses=[self.encrypt(value, public_key) for value in values],
            public_key=public_key,
            encrypted_metadata=EncryptedMetadata(
                timestamp=self.scheme.encrypt_lanes(limbs, public_key),
                question_count=self.encrypt(question_count, public_key, COUNT_DOMAIN),
            ),
        )


class Decryptor:
    """Turns an encrypted prediction into a label and a confidence score."""

    def __init__(self, scheme: HomomorphicScheme, model: LinearModel = DEFAULT_MODEL) -> None:
        self.scheme = scheme
        self.model = model

    def decrypt(self, prediction: Prediction, private_key: bytes) -> AssessmentResult:
        level_lanes = np.asarray(self.scheme.decrypt(prediction.encrypted_level, private_key), dtype=np.int64)
        distance_lanes = np.asarray(
            self.scheme.decrypt(prediction.encrypted_confidence, private_key), dtype=np.int64
        )
        # Each positive lane is one threshold the score lies above.
        ordinal = int(np.count_nonzero(level_lanes > 0))
        confidence = int(min(100, np.abs(distance_lanes).min())) if distance_lanes.size else 0
        return AssessmentResult(label=self.model.label_for(ordinal), confidence=confidence, ordinal=ordinal)

    def decrypt_timestamp(self, ciphertext: Ciphertext, private_key: bytes) -> int:
        """Reassemble the Unix timestamp encrypted by :meth:`Encryptor.encrypt_questionnaire`."""
        return timestamp_from_limbs(self.scheme.decrypt(ciphertext, private_key))
