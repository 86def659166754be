"""Tests for the affine model and its fixed-point conversion."""
import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from fhe_core.domains import COUNT_DOMAIN, RESPONSE_DOMAIN
from fhe_core.errors import DomainError
from fhe_core.model import DEFAULT_MODEL, LinearModel, to_fixed_point


class TestFixedPoint:
    def test_rounds_half_up(self):
        assert to_fixed_point(Decimal("0.45"), 10) == 5
        assert to_fixed_point(Decimal("0.25"), 10) == 3
        assert to_fixed_point(Decimal("-2.15"), 10) == -22

    def test_default_model_scaled_values(self):
        assert DEFAULT_MODEL.scaled_weights == [5, 5, 4, 4, 3, 3, 4, 4, 6]
        assert DEFAULT_MODEL.scaled_intercept == -21
        assert DEFAULT_MODEL.scaled_thresholds == [50, 100, 150]
        assert DEFAULT_MODEL.lanes == 3
        assert DEFAULT_MODEL.question_count == 9

    def test_score_bounds(self):
        assert DEFAULT_MODEL.score_bounds() == (17, 169)


class TestBands:
    @pytest.mark.parametrize(
        "score,band",
        [(17, 0), (50, 0), (51, 1), (100, 1), (101, 2), (150, 2), (151, 3), (169, 3)],
    )
    def test_band_boundaries(self, score, band):
        assert DEFAULT_MODEL.band_of(score) == band

    def test_labels(self):
        assert DEFAULT_MODEL.label_for(0) == "No"
        assert DEFAULT_MODEL.label_for(3) == "High"
        assert DEFAULT_MODEL.label_for(4) == "Unknown"
        assert DEFAULT_MODEL.label_for(-1) == "Unknown"


class TestValidation:
    def test_label_count_must_match_thresholds(self):
        with pytest.raises(ValidationError):
            LinearModel(labels=["No", "High"])

    def test_thresholds_must_increase(self):
        with pytest.raises(ValidationError):
            LinearModel(thresholds=[Decimal(10), Decimal(5), Decimal(15)])

    def test_public_metadata_hides_parameters(self):
        metadata = DEFAULT_MODEL.public_metadata()
        assert metadata["questionsSupported"] == 9
        assert metadata["outputLevels"] == ["No", "Low", "Mild", "High"]
        assert "weights" not in metadata
        assert "thresholds" not in metadata

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text(
            json.dumps(
                {
                    "version": "2.0.0",
                    "scale": 100,
                    "intercept": -1.5,
                    "weights": [0.5, 0.25],
                    "thresholds": [1],
                    "labels": ["No", "Yes"],
                }
            )
        )
        model = LinearModel.from_json_file(path)
        assert model.version == "2.0.0"
        assert model.scaled_weights == [50, 25]
        assert model.scaled_intercept == -150
        assert model.lanes == 1


class TestDomains:
    @pytest.mark.parametrize("value", [1, 3, 5])
    def test_valid_responses(self, value):
        assert RESPONSE_DOMAIN.validate(value) == value

    @pytest.mark.parametrize("value", [0, 6, 2.5, True, "3", None])
    def test_invalid_responses(self, value):
        with pytest.raises(DomainError):
            RESPONSE_DOMAIN.validate(value)

    def test_contains(self):
        assert 255 in COUNT_DOMAIN
        assert 256 not in COUNT_DOMAIN
