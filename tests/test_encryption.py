"""Tests for client-side Encryptor/Decryptor."""
from unittest.mock import patch

import pytest

from fhe_core.domains import COUNT_DOMAIN, TIMESTAMP_LIMBS
from fhe_core.errors import DomainError
from fhe_core.protocol import EncryptedQuestionnaire, Prediction
from streamlit_app.encryption import Decryptor, Encryptor


class TestEncryptor:
    def test_encrypt_replicates_over_model_lanes(self, scheme, keypair, model):
        ct = Encryptor(scheme, model).encrypt(4, keypair.public_key)
        assert ct.lanes == model.lanes
        assert scheme.decrypt(ct, keypair.private_key) == [4] * model.lanes

    @pytest.mark.parametrize("value", [0, 6, 2.5, "4", False])
    def test_rejects_out_of_domain(self, scheme, keypair, value):
        with pytest.raises(DomainError):
            Encryptor(scheme).encrypt(value, keypair.public_key)

    def test_custom_domain(self, scheme, keypair):
        ct = Encryptor(scheme).encrypt(200, keypair.public_key, COUNT_DOMAIN)
        assert scheme.decrypt_value(ct, keypair.private_key) == 200

    def test_encrypt_questionnaire(self, scheme, keypair):
        questionnaire = Encryptor(scheme).encrypt_questionnaire(
            [1, 2, 3, 4, 5, 1, 2, 3, 4], keypair.public_key, timestamp=1_760_000_000
        )
        assert len(questionnaire.encrypted_responses) == 9
        assert scheme.decrypt_value(questionnaire.encrypted_responses[4], keypair.private_key) == 5
        metadata = questionnaire.encrypted_metadata
        assert scheme.decrypt_value(metadata.question_count, keypair.private_key) == 9
        assert Decryptor(scheme).decrypt_timestamp(metadata.timestamp, keypair.private_key) == 1_760_000_000

    @pytest.mark.parametrize("now", [2_013_265_920, 2_100_000_000, 4_102_444_800])
    def test_timestamps_past_the_plaintext_modulus(self, scheme, keypair, now):
        with patch("streamlit_app.encryption.time.time", return_value=now + 0.25):
            questionnaire = Encryptor(scheme).encrypt_questionnaire([2] * 9, keypair.public_key)
        timestamp = questionnaire.encrypted_metadata.timestamp
        assert timestamp.lanes == TIMESTAMP_LIMBS
        assert Decryptor(scheme).decrypt_timestamp(timestamp, keypair.private_key) == now

    @pytest.mark.parametrize("timestamp", [-1, 1 << 48, 1.5])
    def test_timestamp_out_of_range(self, scheme, keypair, timestamp):
        with pytest.raises(DomainError):
            Encryptor(scheme).encrypt_questionnaire([2] * 9, keypair.public_key, timestamp=timestamp)

    def test_questionnaire_validates_before_encrypting(self, scheme, keypair):
        with pytest.raises(DomainError):
            Encryptor(scheme).encrypt_questionnaire([1, 2, 3, 4, 7, 1, 2, 3, 4], keypair.public_key)

    def test_wire_round_trip(self, scheme, keypair):
        questionnaire = Encryptor(scheme).encrypt_questionnaire([3] * 9, keypair.public_key)
        wire = questionnaire.to_wire()
        assert set(wire) == {"encryptedResponses", "encryptedMetadata", "publicKey"}
        restored = EncryptedQuestionnaire.from_wire(
            scheme, wire["encryptedResponses"], wire["publicKey"], wire["encryptedMetadata"]
        )
        assert restored.public_key == keypair.public_key
        assert [scheme.decrypt_value(ct, keypair.private_key) for ct in restored.encrypted_responses] == [3] * 9


class TestDecryptor:
    def _prediction(self, scheme, keypair, level, distances):
        return Prediction(
            encrypted_level=scheme.encrypt_lanes(level, keypair.public_key),
            encrypted_confidence=scheme.encrypt_lanes(distances, keypair.public_key),
        )

    def test_counts_positive_lanes(self, scheme, keypair):
        prediction = self._prediction(scheme, keypair, [-7, 12, 0], [-40, 8, 200])
        result = Decryptor(scheme).decrypt(prediction, keypair.private_key)
        assert result.ordinal == 1
        assert result.label == "Low"
        assert result.confidence == 8

    def test_confidence_is_capped(self, scheme, keypair):
        prediction = self._prediction(scheme, keypair, [1, 1, 1], [-400, 300, 250])
        result = Decryptor(scheme).decrypt(prediction, keypair.private_key)
        assert result.label == "High"
        assert result.confidence == 100

    def test_unknown_ordinal(self, scheme, keypair):
        prediction = self._prediction(scheme, keypair, [1, 1, 1, 1, 1], [5, 5, 5, 5, 5])
        result = Decryptor(scheme).decrypt(prediction, keypair.private_key)
        assert result.ordinal == 5
        assert result.label == "Unknown"
