"""
Tests for NumericContradictionValidator
=======================================
"""

from uuid import uuid4

import pytest
from conftest import make_numeric_claim, make_run

from chemverify.adapters.outbound.model_mock import DEFAULT_OUTPUT
from chemverify.domain.entities import FindingKind, ValidationStatus
from chemverify.domain.services.extractors.composite import (
    CompositeClaimExtractor,
    default_extractors,
)
from chemverify.domain.services.validators import NumericContradictionValidator


def validate_text(text: str, validator: NumericContradictionValidator | None = None):
    run = make_run(text)
    claims = CompositeClaimExtractor(default_extractors()).extract(run.id, text)
    findings = (validator or NumericContradictionValidator()).validate(run.id, claims, run)
    return claims, findings


def with_kind(findings, kind: FindingKind):
    return [f for f in findings if f.kind == kind]


class TestContradictions:
    """Differing values for the same quantity."""

    def test_single_scenario_conflict_fails(self) -> None:
        claims, findings = validate_text(
            "The reaction was run at 80 °C. The mixture was then kept at 100 °C."
        )

        contradictions = with_kind(findings, FindingKind.CONTRADICTION)
        assert len(contradictions) == 1
        finding = contradictions[0]
        assert finding.status == ValidationStatus.FAIL
        assert finding.confidence == 0.7
        assert finding.claim_id == claims[1].id
        assert finding.validator_name == "NumericContradictionValidator"

    def test_scenario_cue_reclassifies(self) -> None:
        _, findings = validate_text(
            "The reaction was run at 80 °C. An alternative route at 100 °C was also tested."
        )

        assert with_kind(findings, FindingKind.CONTRADICTION) == []
        scenarios = with_kind(findings, FindingKind.MULTI_SCENARIO)
        assert len(scenarios) == 1
        assert scenarios[0].status == ValidationStatus.UNVERIFIED
        assert scenarios[0].confidence == 0.5

    def test_cue_outside_window_ignored(self) -> None:
        filler = " The crude material was left to stand." * 5
        text = "Run at 80 °C." + filler + " Then held at 100 °C." + filler + " A separate note."
        _, findings = validate_text(text, NumericContradictionValidator(scenario_window=20))

        assert len(with_kind(findings, FindingKind.CONTRADICTION)) == 1

    def test_equivalent_values_pass(self) -> None:
        _, findings = validate_text("The mixture was stirred for 2 h. After 120 min a solid formed.")

        passes = [f for f in findings if f.status == ValidationStatus.PASS]
        assert len(passes) == 1
        assert passes[0].confidence == 0.95
        assert not with_kind(findings, FindingKind.CONTRADICTION)

    def test_tolerance(self) -> None:
        text = "Heated at 80 °C. Later held at 82 °C."
        _, strict = validate_text(text)
        _, lenient = validate_text(text, NumericContradictionValidator(tolerance_percent=5))

        assert len(with_kind(strict, FindingKind.CONTRADICTION)) == 1
        assert with_kind(lenient, FindingKind.CONTRADICTION) == []

    def test_kelvin_and_celsius_compared(self) -> None:
        _, findings = validate_text("Held at 25 °C. The bath read 298.15 K.")

        assert [f.status for f in findings] == [ValidationStatus.PASS]


class TestNotCheckable:
    """Values without a cross-reference."""

    def test_single_value_not_checkable(self) -> None:
        _, findings = validate_text("The product was isolated in 82% yield.")

        assert len(findings) == 1
        assert findings[0].kind == FindingKind.NOT_CHECKABLE
        assert findings[0].status == ValidationStatus.UNVERIFIED
        assert findings[0].confidence == 0.5

    def test_yield_and_ee_in_one_sentence(self) -> None:
        """Percentages with different labels are never compared."""
        _, findings = validate_text("The product was obtained in 82% yield and 95% ee.")

        assert with_kind(findings, FindingKind.CONTRADICTION) == []
        assert all(f.status != ValidationStatus.FAIL for f in findings)
        assert len(with_kind(findings, FindingKind.NOT_CHECKABLE)) == 1

    def test_value_without_comparable_context(self) -> None:
        _, findings = validate_text("Add 5 mL of THF.")

        assert len(findings) == 1
        assert findings[0].kind == FindingKind.NOT_COMPARABLE
        assert findings[0].confidence == 0.3

    def test_different_entities_not_compared(self) -> None:
        run_id = uuid4()
        run = make_run("placeholder")
        first = make_numeric_claim(run_id, "0.5 M", "0.5", "M", "conc").model_copy(
            update={"entity_key": "nabh4"}
        )
        second = make_numeric_claim(run_id, "1.0 M", "1.0", "M", "conc", start=20).model_copy(
            update={"entity_key": "hcl"}
        )

        findings = NumericContradictionValidator().validate(run_id, [first, second], run)

        assert findings == []

    def test_different_time_actions_not_compared(self) -> None:
        run_id = uuid4()
        run = make_run("placeholder")
        addition = make_numeric_claim(run_id, "30 min", "30", "min", "time", time_action="addition")
        stir = make_numeric_claim(run_id, "2 h", "2", "h", "time", start=40, time_action="stir")

        findings = NumericContradictionValidator().validate(run_id, [addition, stir], run)

        assert findings == []


class TestMockParagraph:
    """The demo paragraph exercises every classification."""

    @pytest.fixture
    def findings(self):
        return validate_text(DEFAULT_OUTPUT)[1]

    def test_temperature_is_multi_scenario(self, findings) -> None:
        assert len(with_kind(findings, FindingKind.MULTI_SCENARIO)) == 1
        assert with_kind(findings, FindingKind.CONTRADICTION) == []

    def test_times_agree(self, findings) -> None:
        passes = [f for f in findings if f.status == ValidationStatus.PASS]
        assert len(passes) == 1
        assert "2 h" in passes[0].message

    def test_yield_and_concentration_not_checkable(self, findings) -> None:
        assert len(with_kind(findings, FindingKind.NOT_CHECKABLE)) == 2
