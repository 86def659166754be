"""Client-side assessment flow as an explicit state machine.

INIT -> KEYS_READY -> ANSWERING(1..n) -> SUBMITTING -> PROCESSING -> RESULT
SUBMITTING/PROCESSING -> ERROR -> (retry | resume | reset)
"""
from __future__ import annotations

import enum
import logging
from typing import List, Optional

from fhe_core.domains import RESPONSE_DOMAIN
from fhe_core.errors import SessionStateError
from fhe_core.model import DEFAULT_MODEL, LinearModel
from fhe_core.protocol import AssessmentResult, Prediction
from streamlit_app.api_client import APIClient
from streamlit_app.encryption import Decryptor, Encryptor
from streamlit_app.fhe_keys import KeyManager

LOGGER = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    INIT = "init"
    KEYS_READY = "keys_ready"
    ANSWERING = "answering"
    SUBMITTING = "submitting"
    PROCESSING = "processing"
    RESULT = "result"
    ERROR = "error"


class AssessmentSession:
    def __init__(
        self,
        key_manager: KeyManager,
        api_client: APIClient,
        model: LinearModel = DEFAULT_MODEL,
    ) -> None:
        self.key_manager = key_manager
        self.api_client = api_client
        self.model = model
        self.encryptor = Encryptor(key_manager.scheme, model)
        self.decryptor = Decryptor(key_manager.scheme, model)

        self.state = SessionState.INIT
        self.step = 0
        self.answers: List[Optional[int]] = [None] * model.question_count
        self.result: Optional[AssessmentResult] = None
        self.error: Optional[str] = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(state.name for state in states)
            raise SessionStateError(f"Operation not allowed in state {self.state.name} (expected {allowed})")

    @property
    def question_count(self) -> int:
        return self.model.question_count

    @property
    def current_answer(self) -> Optional[int]:
        return self.answers[self.step - 1] if self.state is SessionState.ANSWERING else None

    @property
    def is_complete(self) -> bool:
        return all(answer is not None for answer in self.answers)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def prepare_keys(self) -> None:
        self._require(SessionState.INIT)
        self.key_manager.ensure()
        self.state = SessionState.KEYS_READY

    def start(self) -> None:
        self._require(SessionState.KEYS_READY)
        self.answers = [None] * self.question_count
        self.result = None
        self.error = None
        self.step = 1
        self.state = SessionState.ANSWERING

    def answer(self, value: object) -> None:
        self._require(SessionState.ANSWERING)
        self.answers[self.step - 1] = RESPONSE_DOMAIN.validate(value)

    def advance(self) -> None:
        self._require(SessionState.ANSWERING)
        if self.current_answer is None:
            raise SessionStateError(f"Question {self.step} has not been answered")
        if self.step >= self.question_count:
            raise SessionStateError("Already at the last question; submit instead")
        self.step += 1

    def back(self) -> None:
        self._require(SessionState.ANSWERING)
        if self.step == 1:
            self.step = 0
            self.state = SessionState.KEYS_READY
        else:
            self.step -= 1

    def submit(self) -> AssessmentResult:
        self._require(SessionState.ANSWERING)
        if self.step != self.question_count:
            raise SessionStateError(f"Submit is only allowed from question {self.question_count}, at {self.step}")
        if not self.is_complete:
            missing = [index + 1 for index, answer in enumerate(self.answers) if answer is None]
            raise SessionStateError(f"Unanswered questions: {missing}")
        return self._run()

    def retry(self) -> AssessmentResult:
        self._require(SessionState.ERROR)
        return self._run()

    def resume(self) -> None:
        self._require(SessionState.ERROR)
        self.error = None
        self.state = SessionState.ANSWERING

    def reset(self) -> None:
        self._require(SessionState.RESULT, SessionState.ERROR)
        self.step = 0
        self.answers = [None] * self.question_count
        self.result = None
        self.error = None
        self.state = SessionState.INIT

    def forget_keys(self) -> None:
        if self.state in (SessionState.SUBMITTING, SessionState.PROCESSING):
            raise SessionStateError("Cannot clear keys while a submission is in flight")
        self.key_manager.clear()
        self.step = 0
        self.answers = [None] * self.question_count
        self.result = None
        self.error = None
        self.state = SessionState.INIT

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def _run(self) -> AssessmentResult:
        key_pair = self.key_manager.active
        if key_pair is None:
            raise SessionStateError("No active key pair")
        try:
            self.state = SessionState.SUBMITTING
            questionnaire = self.encryptor.encrypt_questionnaire(self.answers, key_pair.public_key)
            data = self.api_client.assess_encrypted(questionnaire.to_wire())

            self.state = SessionState.PROCESSING
            prediction = Prediction.from_wire(self.key_manager.scheme, data, key_pair.public_key)
            result = self.decryptor.decrypt(prediction, key_pair.private_key)
        except Exception as exc:
            LOGGER.error("❌ Assessment failed in %s: %s", self.state.name, exc)
            self.error = str(exc) or type(exc).__name__
            self.state = SessionState.ERROR
            raise
        self.result = result
        self.error = None
        self.state = SessionState.RESULT
        LOGGER.info("✅ Assessment completed")
        return result
