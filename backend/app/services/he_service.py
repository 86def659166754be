"""Request-level entry point for encrypted assessments.

The engine owns the homomorphic scheme, the loaded model and the scoring
engine. It is created once per application and initialized lazily on the first
request (or explicitly through ``POST /initialize``). It never sees a private key.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional

from app.core.config import Settings
from app.services.scoring_engine import ScoringEngine
from fhe_core.bfv_scheme import BFVScheme
from fhe_core.errors import CLIENT_ERRORS, CryptoInitError, ProcessingError
from fhe_core.model import DEFAULT_MODEL, LinearModel
from fhe_core.protocol import EncryptedQuestionnaire

LOGGER = logging.getLogger(__name__)


class HEAssessmentEngine:
    """High-level HE assessment engine entry point."""

    def __init__(self, settings: Settings, model: Optional[LinearModel] = None) -> None:
        self._settings = settings
        self._model_override = model
        self._lock = threading.Lock()
        self._scheme: Optional[BFVScheme] = None
        self._model: Optional[LinearModel] = None
        self._scoring: Optional[ScoringEngine] = None

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------
    @property
    def is_initialized(self) -> bool:
        return self._scoring is not None

    def initialize(self) -> None:
        """Build the scheme and load the model. Safe to call repeatedly."""
        if self.is_initialized:
            return
        with self._lock:
            if self.is_initialized:
                return
            start = time.perf_counter()
            try:
                scheme = BFVScheme(
                    poly_modulus_degree=self._settings.BFV_POLY_MODULUS_DEGREE,
                    plain_modulus=self._settings.BFV_PLAIN_MODULUS,
                    key_cache_size=self._settings.BFV_KEY_CACHE_SIZE,
                )
                model = self._load_model()
            except CryptoInitError:
                raise
            except Exception as exc:  # noqa: BLE001
                raise CryptoInitError(f"Failed to initialize HE engine: {exc}") from exc
            self._scheme, self._model = scheme, model
            self._scoring = ScoringEngine(scheme)
            LOGGER.info(
                "HE engine initialized with %s, model v%s (%.1f ms)",
                scheme.name,
                model.version,
                (time.perf_counter() - start) * 1000,
            )

    def ensure_initialized(self) -> None:
        if not self.is_initialized:
            self.initialize()

    def _load_model(self) -> LinearModel:
        if self._model_override is not None:
            return self._model_override
        path = self._settings.ASSESSMENT_MODEL_PATH
        if path:
            LOGGER.info("Loading assessment model from %s", path)
            return LinearModel.from_json_file(path)
        return DEFAULT_MODEL

    @property
    def model(self) -> LinearModel:
        self.ensure_initialized()
        assert self._model is not None
        return self._model

    # ------------------------------------------------------------------
    # Assessment
    # ------------------------------------------------------------------
    def run_encrypted_assessment(
        self,
        encrypted_responses: List[str],
        public_key_b64: str,
        encrypted_metadata: Optional[Dict[str, Optional[str]]] = None,
    ) -> Dict[str, Any]:
        """Score a base64 submission and return the base64 prediction payload."""
        self.ensure_initialized()
        assert self._scheme is not None and self._scoring is not None and self._model is not None
        try:
            questionnaire = EncryptedQuestionnaire.from_wire(
                self._scheme, encrypted_responses, public_key_b64, encrypted_metadata
            )
            prediction = self._scoring.evaluate(questionnaire, self._model)
            return prediction.to_wire()
        except CLIENT_ERRORS + (CryptoInitError,):
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Encrypted assessment failed")
            raise ProcessingError("Failed to process encrypted assessment") from exc
