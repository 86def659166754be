"""Affine questionnaire model shared by the client and the scoring service.

Weights, intercept and thresholds are stored as decimals and converted to
fixed-point integers (``value * scale``, rounded half up) before any
homomorphic work, since the ciphertexts only carry integers.
"""
from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from pydantic import BaseModel, Field, model_validator

from fhe_core.domains import RESPONSE_DOMAIN


def to_fixed_point(value: Decimal, scale: int) -> int:
    return int((value * scale).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class LinearModel(BaseModel):
    """Versioned affine model ``S = intercept + sum(w_i * x_i)`` plus band thresholds."""

    version: str = "1.0.0"
    description: str = "Homomorphic depression screening model"
    scale: int = Field(10, gt=0)
    intercept: Decimal = Decimal("-2.1")
    weights: List[Decimal] = Field(
        default_factory=lambda: [
            Decimal(w) for w in ("0.45", "0.52", "0.38", "0.41", "0.29", "0.33", "0.36", "0.44", "0.59")
        ],
        min_length=1,
    )
    thresholds: List[Decimal] = Field(
        default_factory=lambda: [Decimal(5), Decimal(10), Decimal(15)],
        min_length=1,
    )
    labels: List[str] = Field(default_factory=lambda: ["No", "Low", "Mild", "High"])
    confidence_gain: int = Field(4, gt=0)
    response_scale: str = "1-5 (Never to Always)"

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_shape(self) -> "LinearModel":
        if len(self.labels) != len(self.thresholds) + 1:
            raise ValueError("labels must contain exactly one more entry than thresholds")
        scaled = self.scaled_thresholds
        if any(b <= a for a, b in zip(scaled, scaled[1:])):
            raise ValueError("thresholds must be strictly increasing after scaling")
        return self

    # ------------------------------------------------------------------
    # Fixed-point views
    # ------------------------------------------------------------------
    @property
    def scaled_weights(self) -> List[int]:
        return [to_fixed_point(w, self.scale) for w in self.weights]

    @property
    def scaled_intercept(self) -> int:
        return to_fixed_point(self.intercept, self.scale)

    @property
    def scaled_thresholds(self) -> List[int]:
        return [to_fixed_point(t, self.scale) for t in self.thresholds]

    @property
    def question_count(self) -> int:
        return len(self.weights)

    @property
    def lanes(self) -> int:
        return len(self.thresholds)

    def score_bounds(self) -> Tuple[int, int]:
        """Smallest and largest scaled score reachable over the response domain."""
        low = high = self.scaled_intercept
        for weight in self.scaled_weights:
            a, b = weight * RESPONSE_DOMAIN.low, weight * RESPONSE_DOMAIN.high
            low += min(a, b)
            high += max(a, b)
        return low, high

    def scaled_score(self, responses: List[int]) -> int:
        """Plaintext reference of the encrypted computation."""
        return self.scaled_intercept + sum(w * x for w, x in zip(self.scaled_weights, responses))

    def band_of(self, scaled_score: int) -> int:
        """Band index ``i`` such that ``T[i-1] < S <= T[i]``."""
        return sum(1 for threshold in self.scaled_thresholds if scaled_score > threshold)

    def label_for(self, ordinal: int) -> str:
        if 0 <= ordinal < len(self.labels):
            return self.labels[ordinal]
        return "Unknown"

    # ------------------------------------------------------------------
    # Metadata / loading
    # ------------------------------------------------------------------
    def public_metadata(self) -> Dict[str, Any]:
        """Non-sensitive description of the model (no weights or thresholds)."""
        return {
            "version": self.version,
            "description": self.description,
            "questionsSupported": self.question_count,
            "responseScale": self.response_scale,
            "outputLevels": list(self.labels),
            "privacyFeatures": [
                "End-to-end homomorphic encryption",
                "No raw data exposure",
                "Client-side key generation",
                "Server-side encrypted processing",
            ],
        }

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "LinearModel":
        data = json.loads(Path(path).read_text(encoding="utf-8"), parse_float=Decimal)
        return cls.model_validate(data)


DEFAULT_MODEL = LinearModel()

__all__ = ["LinearModel", "DEFAULT_MODEL", "to_fixed_point"]
