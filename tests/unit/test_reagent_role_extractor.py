"""
Tests for ReagentRoleExtractor
==============================
"""

from uuid import uuid4

import pytest

from chemverify.domain.entities import ClaimType
from chemverify.domain.services.extractors.reagent_role import (
    ReagentRoleExtractor,
    normalize_atmosphere,
    normalize_symbolic_temperature,
)


@pytest.fixture
def extractor() -> ReagentRoleExtractor:
    return ReagentRoleExtractor()


def by_type(claims, claim_type: ClaimType):
    return [c for c in claims if c.claim_type == claim_type]


class TestReagentRoleExtractor:
    """Role tagging of reagents and reaction conditions."""

    def test_reagent_solvent_and_atmosphere(self, extractor: ReagentRoleExtractor) -> None:
        claims = extractor.extract(uuid4(), "NaBH4 was added in MeOH under argon.")

        reagents = by_type(claims, ClaimType.REAGENT_MENTION)
        assert len(reagents) == 1
        assert reagents[0].raw_text == "NaBH4"
        assert reagents[0].payload["role"] == "reductant"
        assert reagents[0].entity_key == "nabh4"

        solvents = by_type(claims, ClaimType.SOLVENT_MENTION)
        assert [s.raw_text for s in solvents] == ["MeOH"]
        assert solvents[0].payload["role"] == "solvent"

        atmospheres = by_type(claims, ClaimType.ATMOSPHERE_CONDITION)
        assert len(atmospheres) == 1
        assert atmospheres[0].normalized_value == "argon"
        assert atmospheres[0].entity_key == "argon"

    def test_base_role(self, extractor: ReagentRoleExtractor) -> None:
        claims = extractor.extract(uuid4(), "Triethylamine and DMAP were used; K2CO3 as well.")

        reagents = by_type(claims, ClaimType.REAGENT_MENTION)
        assert {r.raw_text for r in reagents} == {"DMAP", "K2CO3"}
        assert all(r.payload["role"] == "base" for r in reagents)

    def test_catalyst_with_parentheses(self, extractor: ReagentRoleExtractor) -> None:
        claims = extractor.extract(uuid4(), "Pd(PPh3)4 (5 mol%) was added.")

        reagents = by_type(claims, ClaimType.REAGENT_MENTION)
        assert [r.payload["role"] for r in reagents] == ["catalyst"]

    def test_dryness_and_symbolic_temperature(self, extractor: ReagentRoleExtractor) -> None:
        claims = extractor.extract(uuid4(), "Anhydrous toluene was refluxed overnight.")

        dryness = by_type(claims, ClaimType.DRYNESS_CONDITION)
        assert [d.normalized_value for d in dryness] == ["anhydrous"]
        temps = by_type(claims, ClaimType.SYMBOLIC_TEMPERATURE)
        assert [t.normalized_value for t in temps] == ["reflux"]
        assert temps[0].payload["role"] == "temperature"

    def test_step_index(self, extractor: ReagentRoleExtractor) -> None:
        claims = extractor.extract(uuid4(), "NaBH4 was added. The mixture was washed with water.")

        reagent = by_type(claims, ClaimType.REAGENT_MENTION)[0]
        solvent = by_type(claims, ClaimType.SOLVENT_MENTION)[0]
        assert reagent.step_index == 0
        assert solvent.raw_text == "water"
        assert solvent.step_index == 1

    def test_empty_text(self, extractor: ReagentRoleExtractor) -> None:
        assert extractor.extract(uuid4(), "") == []


class TestNormalization:
    """Normalization helpers."""

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("under argon", "argon"),
            ("under Ar", "argon"),
            ("N2", "nitrogen"),
            ("under nitrogen", "nitrogen"),
            ("open to air", "air"),
        ],
    )
    def test_atmosphere(self, token: str, expected: str) -> None:
        assert normalize_atmosphere(token) == expected

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("reflux", "reflux"),
            ("refluxing", "reflux"),
            ("dry ice/acetone", "dry_ice"),
            ("ice bath", "ice_bath"),
            ("ice-water", "ice_bath"),
            ("room temperature", "room_temperature"),
            ("rt", "room_temperature"),
        ],
    )
    def test_symbolic_temperature(self, token: str, expected: str) -> None:
        assert normalize_symbolic_temperature(token) == expected
