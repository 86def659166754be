"""Homomorphic evaluation of the questionnaire model.

The engine only ever adds ciphertexts and multiplies them by public integers.
Classification is done with a threshold-revealing comparison: each lane of the
level ciphertext holds a blinded ``r * (S - T) - s`` whose sign tells the key
holder whether the score ``S`` is above threshold ``T``, without revealing ``S``.
Lanes are assigned to thresholds under a fresh random permutation per request.
"""
from __future__ import annotations

import logging
import random
import time
from typing import List, Optional, Sequence

from fhe_core.ciphertext import Ciphertext, HomomorphicScheme
from fhe_core.errors import ShapeError
from fhe_core.model import LinearModel
from fhe_core.protocol import EncryptedQuestionnaire, Prediction

LOGGER = logging.getLogger(__name__)

# Largest multiplicative blinding factor, further reduced when the plaintext
# modulus is too small to hold r * |S - T| without wrapping.
MAX_BLINDING_FACTOR = 1 << 16


class ScoringEngine:
    """Stateless evaluator: ``evaluate(questionnaire, model) -> Prediction``."""

    def __init__(self, scheme: HomomorphicScheme, rng: Optional[random.Random] = None) -> None:
        self.scheme = scheme
        self._rng = rng or random.SystemRandom()

    def evaluate(self, questionnaire: EncryptedQuestionnaire, model: LinearModel) -> Prediction:
        start = time.perf_counter()
        responses = questionnaire.encrypted_responses
        if len(responses) != model.question_count:
            raise ShapeError(f"Expected {model.question_count} encrypted responses, got {len(responses)}")
        for index, ciphertext in enumerate(responses):
            if ciphertext.lanes != model.lanes:
                raise ShapeError(
                    f"Response {index + 1} carries {ciphertext.lanes} lanes, model expects {model.lanes}"
                )

        public_key = questionnaire.public_key
        score = self.weighted_sum(responses, model.scaled_weights, public_key, model.lanes)
        intercept = model.scaled_intercept
        if intercept < 0:
            score = score.sub(self.scheme.encrypt(-intercept, public_key, lanes=model.lanes))
        else:
            score = score.add(self.scheme.encrypt(intercept, public_key, lanes=model.lanes))

        prediction = Prediction(
            encrypted_level=self._blinded_comparison(score, model, public_key),
            encrypted_confidence=self._threshold_distances(score, model, public_key),
        )
        LOGGER.info(
            "🧮 Encrypted assessment evaluated key_id=%s (%.1f ms)",
            score.key_id,
            (time.perf_counter() - start) * 1000,
        )
        return prediction

    def weighted_sum(
        self,
        responses: Sequence[Ciphertext],
        weights: Sequence[int],
        public_key: bytes,
        lanes: int,
    ) -> Ciphertext:
        total: Optional[Ciphertext] = None
        for ciphertext, weight in zip(responses, weights):
            if weight == 0:
                continue
            term = ciphertext.scalar_mul(weight)
            total = term if total is None else total.add(term)
        if total is None:
            return self.scheme.encrypt(0, public_key, lanes=lanes)
        return total

    def blinding_limit(self, model: LinearModel) -> int:
        """Largest ``r`` keeping every blinded lane inside ``(-t/2, t/2)``."""
        low, high = model.score_bounds()
        thresholds = model.scaled_thresholds
        distance = max(abs(high - min(thresholds)), abs(low - max(thresholds)), 1) + 1
        half_modulus = (self.scheme.plaintext_modulus - 1) // 2
        return max(1, min(MAX_BLINDING_FACTOR, half_modulus // (distance + 1)))

    def _permuted_thresholds(self, model: LinearModel) -> List[int]:
        thresholds = list(model.scaled_thresholds)
        self._rng.shuffle(thresholds)
        return thresholds

    def _blinded_comparison(self, score: Ciphertext, model: LinearModel, public_key: bytes) -> Ciphertext:
        thresholds = self._permuted_thresholds(model)
        limit = self.blinding_limit(model)
        factors = [self._rng.randint(1, limit) for _ in thresholds]
        offsets = [self._rng.randrange(factor) for factor in factors]
        shifted = score.sub(self.scheme.encrypt_lanes(thresholds, public_key))
        blinded = shifted.scalar_mul(factors)
        if any(offsets):
            blinded = blinded.sub(self.scheme.encrypt_lanes(offsets, public_key))
        return blinded

    def _threshold_distances(self, score: Ciphertext, model: LinearModel, public_key: bytes) -> Ciphertext:
        thresholds = self._permuted_thresholds(model)
        shifted = score.sub(self.scheme.encrypt_lanes(thresholds, public_key))
        return shifted.scalar_mul(model.confidence_gain)


__all__ = ["ScoringEngine", "MAX_BLINDING_FACTOR"]
