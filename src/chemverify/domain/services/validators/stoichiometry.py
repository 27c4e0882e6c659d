"""
Stoichiometry checks comparing extracted amounts with each other:
equivalents against mmol ratios, yields against masses, and masses
against their mmol amounts.
"""

from __future__ import annotations

import re
import sys
from typing import TYPE_CHECKING

from chemverify.domain.entities import ClaimType, FindingKind, ValidationStatus
from chemverify.domain.services import units
from chemverify.domain.services.evidence_locator import try_parse
from chemverify.domain.services.validators.base import ValidatorBase

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun

EQUIV_PATTERN = re.compile(
    r"(?P<num>\d+(?:\.\d+)?)\s*(?P<unit>equiv(?:alent)?s?|eq)\b\.?", re.IGNORECASE
)

DEFAULT_TOLERANCE = 0.25
MAX_PAIRING_DISTANCE = 80

# Stated yield vs mass recovery: relative tolerance plus an absolute buffer
YIELD_MASS_TOLERANCE = 0.35
YIELD_MASS_BUFFER_MG = 5.0

# Plausible molecular weights, g/mol
MIN_PLAUSIBLE_MW = 5.0
MAX_PLAUSIBLE_MW = 3000.0
MW_ENTITY_PAIRING_DISTANCE = 100
MW_FALLBACK_PAIRING_DISTANCE = 30

_MASS_UNITS = frozenset({"mg", "g", "kg"})
_AMOUNT_UNITS = frozenset({"mmol", "mol"})


def _positive_value(claim: Claim) -> float | None:
    try:
        value = float(claim.normalized_value or "")
    except ValueError:
        return None
    return value if value > 0 else None


def _start_offset(claim: Claim) -> int:
    span = try_parse(claim.source_locator)
    return span[0] if span is not None else sys.maxsize


def _numeric_claims(claims: list[Claim], unit_set: frozenset[str]) -> list[Claim]:
    return [
        claim
        for claim in claims
        if claim.claim_type == ClaimType.NUMERIC_WITH_UNIT
        and claim.unit in unit_set
        and _positive_value(claim) is not None
    ]


class EquivalentsConsistencyValidator(ValidatorBase):
    """Compares each "X equiv" mention with the nearest mmol amount."""

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE) -> None:
        self._tolerance = tolerance

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        located = [
            (span[0], claim)
            for claim in claims
            if claim.claim_type == ClaimType.NUMERIC_WITH_UNIT
            and claim.unit == "mmol"
            and (span := try_parse(claim.source_locator)) is not None
        ]
        if len(located) < 2:
            return []
        located.sort(key=lambda item: item[0])

        reference = located[0][1]
        reference_mmol = _positive_value(reference)
        if reference_mmol is None:
            return []

        findings: list[Finding] = []
        for match in EQUIV_PATTERN.finditer(text):
            stated = float(match.group("num"))
            if stated <= 0:
                continue

            nearest = min(located, key=lambda item: abs(item[0] - match.start()))
            if abs(nearest[0] - match.start()) >= MAX_PAIRING_DISTANCE:
                continue
            claim = nearest[1]
            if claim.id == reference.id:
                continue
            reagent_mmol = _positive_value(claim)
            if reagent_mmol is None:
                continue

            expected = reagent_mmol / reference_mmol
            relative_error = abs(expected - stated) / max(stated, 0.001)
            if relative_error <= self._tolerance:
                continue

            findings.append(
                self._finding(
                    run_id,
                    ValidationStatus.FAIL,
                    f"[CHEM.EQUIV_INCONSISTENT] Stated {stated:g} equiv for "
                    f"{claim.entity_key or claim.raw_text} ({reagent_mmol:g} mmol) vs reference "
                    f"{reference_mmol:g} mmol implies {expected:.2f} equiv.",
                    0.8,
                    kind=FindingKind.EQUIVALENTS_INCONSISTENT,
                    claim=claim,
                    payload={
                        "stated_equiv": stated,
                        "computed_equiv": round(expected, 2),
                        "reference_mmol": reference_mmol,
                        "reagent_mmol": reagent_mmol,
                    },
                )
            )
        return findings


class YieldMassConsistencyValidator(ValidatorBase):
    """
    Checks a stated yield against the product and starting masses.

    The first mass in the text is taken as the starting material and the
    last as the product. Masses alone ignore molecular weight, so only a
    recovery far above the stated yield is reported.
    """

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        yields = [
            claim
            for claim in _numeric_claims(claims, frozenset({"%"}))
            if claim.context_key == "yield"
        ]
        if not yields:
            return []
        yield_claim = max(yields, key=lambda c: c.step_index or 0)
        stated = _positive_value(yield_claim)
        if stated is None or stated > 100:
            return []

        masses = sorted(
            _numeric_claims(claims, _MASS_UNITS),
            key=lambda c: (c.step_index or 0, _start_offset(c)),
        )
        if len(masses) < 2:
            return []
        starting, product = masses[0], masses[-1]

        starting_mg = units.normalize(_positive_value(starting), starting.unit)[0] * 1000.0
        product_mg = units.normalize(_positive_value(product), product.unit)[0] * 1000.0
        recovery = product_mg / starting_mg * 100.0

        relative_error = abs(recovery - stated) / max(stated, 1.0)
        ceiling = (1.0 + YIELD_MASS_TOLERANCE) * 100.0
        buffer = YIELD_MASS_BUFFER_MG / max(starting_mg, 0.001) * 100.0
        if relative_error <= YIELD_MASS_TOLERANCE or recovery <= ceiling + buffer:
            return []

        return [
            self._finding(
                run_id,
                ValidationStatus.FAIL,
                f"[CHEM.YIELD_MASS_INCONSISTENT] Stated {stated:g}% yield, but product mass "
                f"({product.raw_text}) vs starting mass ({starting.raw_text}) implies "
                f"~{recovery:.0f}% mass recovery.",
                0.6,
                kind=FindingKind.YIELD_MASS_INCONSISTENT,
                claim=yield_claim,
                payload={
                    "stated_yield": stated,
                    "mass_recovery_pct": round(recovery, 1),
                    "starting_mass_mg": starting_mg,
                    "product_mass_mg": product_mg,
                },
            )
        ]


class MwConsistencyValidator(ValidatorBase):
    """
    Checks the molecular weight implied by a mass and its mmol amount.

    A mass pairs with an amount of the same entity, preferring the same
    step and then the nearest one within a short distance. Masses with
    no entity pair only with a single unnamed amount close by in the same
    step.
    """

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        masses = _numeric_claims(claims, _MASS_UNITS)
        amounts = _numeric_claims(claims, _AMOUNT_UNITS)
        if not masses or not amounts:
            return []

        findings: list[Finding] = []
        for mass in masses:
            amount = self._paired_amount(mass, amounts)
            if amount is None:
                continue

            grams = units.normalize(_positive_value(mass), mass.unit)[0]
            mmol = units.normalize(_positive_value(amount), amount.unit)[0]
            implied_mw = grams / (mmol / 1000.0)
            entity = mass.entity_key or mass.raw_text
            payload = {
                "entity": entity,
                "mass_g": round(grams, 4),
                "mmol": mmol,
                "implied_mw": round(implied_mw, 1),
            }

            if MIN_PLAUSIBLE_MW <= implied_mw <= MAX_PLAUSIBLE_MW:
                findings.append(
                    self._finding(
                        run_id,
                        ValidationStatus.PASS,
                        f"[CHEM.MW_CONSISTENT] {entity}: {mass.raw_text} / {amount.raw_text} "
                        f"implies MW {implied_mw:.1f} g/mol (plausible).",
                        0.75,
                        kind=FindingKind.MW_CONSISTENT,
                        claim=mass,
                        payload=payload,
                    )
                )
            else:
                findings.append(
                    self._finding(
                        run_id,
                        ValidationStatus.FAIL,
                        f"[CHEM.MW_IMPLAUSIBLE] {entity}: {mass.raw_text} / {amount.raw_text} "
                        f"implies MW {implied_mw:.1f} g/mol (outside "
                        f"{MIN_PLAUSIBLE_MW:g}-{MAX_PLAUSIBLE_MW:g} g/mol).",
                        0.7,
                        kind=FindingKind.MW_IMPLAUSIBLE,
                        claim=mass,
                        payload=payload,
                    )
                )
        return findings

    @staticmethod
    def _paired_amount(mass: Claim, amounts: list[Claim]) -> Claim | None:
        def distance(other: Claim) -> int:
            return abs(_start_offset(mass) - _start_offset(other))

        if mass.entity_key is not None:
            entity = mass.entity_key.lower()
            same_entity = [a for a in amounts if a.entity_key and a.entity_key.lower() == entity]
            same_step = [
                a
                for a in same_entity
                if a.step_index is not None and a.step_index == mass.step_index
            ]
            if same_step:
                return min(same_step, key=distance)
            nearby = [a for a in same_entity if distance(a) < MW_ENTITY_PAIRING_DISTANCE]
            if nearby:
                return min(nearby, key=distance)
            return None

        if mass.step_index is None:
            return None
        unnamed = [
            a
            for a in amounts
            if a.entity_key is None
            and a.step_index == mass.step_index
            and distance(a) <= MW_FALLBACK_PAIRING_DISTANCE
        ]
        return unnamed[0] if len(unnamed) == 1 else None
