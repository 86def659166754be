"""Tests for the client assessment state machine."""
from unittest.mock import Mock

import pytest

from app.services.scoring_engine import ScoringEngine
from fhe_core.errors import DomainError, SessionStateError, TransportError
from fhe_core.protocol import EncryptedQuestionnaire
from streamlit_app.fhe_keys import KeyManager, MemoryKeyStore
from streamlit_app.session import AssessmentSession, SessionState


class InProcessClient:
    """Stands in for the HTTP client by scoring the payload locally."""

    def __init__(self, scheme, model):
        self.scheme = scheme
        self.model = model
        self.calls = 0

    def assess_encrypted(self, payload):
        self.calls += 1
        questionnaire = EncryptedQuestionnaire.from_wire(
            self.scheme, payload["encryptedResponses"], payload["publicKey"], payload["encryptedMetadata"]
        )
        return ScoringEngine(self.scheme).evaluate(questionnaire, self.model).to_wire()


@pytest.fixture
def key_manager(scheme, keypair):
    manager = KeyManager(scheme, MemoryKeyStore())
    manager.persist(keypair)
    return manager


@pytest.fixture
def session(key_manager, scheme, model):
    return AssessmentSession(key_manager, InProcessClient(scheme, model), model)


def _answer_all(session, value):
    session.prepare_keys()
    session.start()
    for step in range(session.question_count):
        session.answer(value)
        if step < session.question_count - 1:
            session.advance()


class TestTransitions:
    def test_happy_path(self, session):
        assert session.state is SessionState.INIT
        _answer_all(session, 5)
        assert session.step == 9
        result = session.submit()
        assert session.state is SessionState.RESULT
        assert result.label == "High"
        assert session.result == result

    def test_prepare_keys_keeps_existing_pair(self, session, keypair):
        session.prepare_keys()
        assert session.state is SessionState.KEYS_READY
        assert session.key_manager.active == keypair

    def test_answer_is_validated(self, session):
        session.prepare_keys()
        session.start()
        with pytest.raises(DomainError):
            session.answer(6)
        assert session.current_answer is None

    def test_cannot_advance_without_answer(self, session):
        session.prepare_keys()
        session.start()
        with pytest.raises(SessionStateError):
            session.advance()

    def test_back_preserves_answers(self, session):
        session.prepare_keys()
        session.start()
        session.answer(2)
        session.advance()
        session.back()
        assert session.step == 1
        assert session.current_answer == 2
        session.back()
        assert session.state is SessionState.KEYS_READY

    def test_submit_requires_all_answers(self, session):
        session.prepare_keys()
        session.start()
        session.answer(1)
        with pytest.raises(SessionStateError):
            session.submit()

    def test_submit_only_from_last_question(self, key_manager, model):
        client = Mock()
        session = AssessmentSession(key_manager, client, model)
        _answer_all(session, 4)
        for _ in range(6):
            session.back()
        assert session.step == 3
        assert session.is_complete

        with pytest.raises(SessionStateError):
            session.submit()
        assert session.state is SessionState.ANSWERING
        client.assess_encrypted.assert_not_called()

    def test_illegal_transitions(self, session):
        with pytest.raises(SessionStateError):
            session.start()
        with pytest.raises(SessionStateError):
            session.answer(3)
        with pytest.raises(SessionStateError):
            session.retry()
        with pytest.raises(SessionStateError):
            session.reset()

    def test_reset_keeps_keys(self, session, keypair):
        _answer_all(session, 1)
        session.submit()
        session.reset()
        assert session.state is SessionState.INIT
        assert session.answers == [None] * 9
        assert session.key_manager.active == keypair

    def test_forget_keys(self, session):
        session.prepare_keys()
        session.forget_keys()
        assert session.state is SessionState.INIT
        assert session.key_manager.active is None
        assert session.key_manager.load_if_present() is None


class TestErrors:
    def test_transport_failure_moves_to_error_and_retry_succeeds(self, key_manager, scheme, model):
        client = InProcessClient(scheme, model)
        session = AssessmentSession(key_manager, client, model)
        _answer_all(session, 1)

        original = client.assess_encrypted
        client.assess_encrypted = Mock(side_effect=TransportError("connection refused"))
        with pytest.raises(TransportError):
            session.submit()
        assert session.state is SessionState.ERROR
        assert session.error == "connection refused"
        assert session.answers == [1] * 9

        client.assess_encrypted = original
        result = session.retry()
        assert session.state is SessionState.RESULT
        assert result.label == "No"
        assert session.error is None

    def test_resume_returns_to_preserved_step(self, key_manager, scheme, model):
        client = Mock()
        client.assess_encrypted.side_effect = TransportError("HTTP 500")
        session = AssessmentSession(key_manager, client, model)
        _answer_all(session, 3)
        with pytest.raises(TransportError):
            session.submit()
        session.resume()
        assert session.state is SessionState.ANSWERING
        assert session.step == 9
        assert session.current_answer == 3

    def test_malformed_response_fails_in_processing(self, key_manager, scheme, model):
        client = Mock()
        client.assess_encrypted.return_value = {"unexpected": True}
        session = AssessmentSession(key_manager, client, model)
        _answer_all(session, 3)
        with pytest.raises(TransportError):
            session.submit()
        assert session.state is SessionState.ERROR
