"""
Numeric Contradiction Validator
===============================

Groups numeric claims by context key and canonical unit and compares
every pair in a group. Differing values are a contradiction unless the
text around them describes separate experiments ("alternative route",
"also tested"), in which case the group is reported once as a
multi-scenario finding.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from chemverify.domain.entities import ClaimType, FindingKind, ValidationStatus
from chemverify.domain.services import units
from chemverify.domain.services.evidence_locator import try_parse
from chemverify.domain.services.validators.base import ValidatorBase

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun

logger = logging.getLogger(__name__)

MULTI_SCENARIO_PATTERN = re.compile(
    r"\b(?:alternativ\w*|route|separate\w*|trial|condition\s*set|variant|respective\w*|"
    r"also\s+(?:tested|tried|run|performed|examined|explored))\b",
    re.IGNORECASE,
)

DEFAULT_COMPARABLE_KEYS = frozenset({"temp", "time", "yield", "conc", "pressure", "purity"})
DEFAULT_SCENARIO_WINDOW = 80


def _as_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class NumericContradictionValidator(ValidatorBase):
    """Detects conflicting values for the same measured quantity."""

    def __init__(
        self,
        comparable_keys: Iterable[str] = DEFAULT_COMPARABLE_KEYS,
        scenario_window: int = DEFAULT_SCENARIO_WINDOW,
        tolerance_percent: float = 0.0,
    ) -> None:
        self._comparable_keys = frozenset(comparable_keys)
        self._scenario_window = scenario_window
        self._tolerance = tolerance_percent / 100.0

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        findings: list[Finding] = []
        text = run.analyzed_text
        groups: dict[tuple[str, str], list[Claim]] = {}

        for claim in claims:
            if claim.claim_type != ClaimType.NUMERIC_WITH_UNIT or not claim.unit:
                continue
            if claim.context_key not in self._comparable_keys:
                findings.append(
                    self._finding(
                        run_id,
                        ValidationStatus.UNVERIFIED,
                        f"Numeric claim ({claim.raw_text}) has no comparable context; "
                        "skipped for contradiction checking.",
                        0.3,
                        kind=FindingKind.NOT_COMPARABLE,
                        claim=claim,
                    )
                )
                continue
            key = (claim.context_key, units.canonical_unit(claim.unit))
            groups.setdefault(key, []).append(claim)

        for (context_key, unit), group in groups.items():
            if len(group) == 1:
                findings.append(
                    self._finding(
                        run_id,
                        ValidationStatus.UNVERIFIED,
                        f"Single {context_key} value ({group[0].raw_text}); "
                        "nothing to cross-check it against.",
                        0.5,
                        kind=FindingKind.NOT_CHECKABLE,
                        claim=group[0],
                    )
                )
                continue
            findings.extend(self._compare_group(run_id, context_key, unit, group, text))

        return findings

    def _compare_group(
        self, run_id: UUID, context_key: str, unit: str, group: list[Claim], text: str
    ) -> list[Finding]:
        findings: list[Finding] = []
        conflicts: list[tuple[Claim, Claim]] = []

        for i, first in enumerate(group):
            for second in group[i + 1 :]:
                if not self._are_comparable(first, second):
                    continue
                value_a = self._normalized(first)
                value_b = self._normalized(second)
                if value_a is None or value_b is None:
                    continue

                if self._agree(value_a, value_b):
                    findings.append(
                        self._finding(
                            run_id,
                            ValidationStatus.PASS,
                            f"Claims are consistent: {first.raw_text} ≈ {second.raw_text} "
                            f"({value_a:g} {unit}).",
                            0.95,
                            claim=first,
                        )
                    )
                else:
                    conflicts.append((first, second))

        if not conflicts:
            return findings

        by_id: dict[UUID, Claim] = {}
        for pair in conflicts:
            for claim in pair:
                by_id.setdefault(claim.id, claim)
        involved = list(by_id.values())
        if any(self._has_scenario_cue(text, claim) for claim in involved):
            values = ", ".join(claim.raw_text for claim in involved)
            logger.debug(f"Multi-scenario {context_key} values: {values}")
            findings.append(
                self._finding(
                    run_id,
                    ValidationStatus.UNVERIFIED,
                    f"Multiple scenarios detected ({values}); "
                    "values may refer to different conditions.",
                    0.5,
                    kind=FindingKind.MULTI_SCENARIO,
                    evidence_ref=involved[0].source_locator,
                    payload={"context_key": context_key, "values": [c.raw_text for c in involved]},
                )
            )
            return findings

        for first, second in conflicts:
            findings.append(
                self._finding(
                    run_id,
                    ValidationStatus.FAIL,
                    f"Possible contradiction: {first.raw_text} vs {second.raw_text}.",
                    0.7,
                    kind=FindingKind.CONTRADICTION,
                    claim=second,
                    payload={
                        "context_key": context_key,
                        "first": first.raw_text,
                        "second": second.raw_text,
                        "first_claim_id": str(first.id),
                    },
                )
            )
        return findings

    @staticmethod
    def _are_comparable(a: Claim, b: Claim) -> bool:
        if a.entity_key and b.entity_key and a.entity_key.lower() != b.entity_key.lower():
            return False
        action_a = a.payload.get("time_action")
        action_b = b.payload.get("time_action")
        if a.context_key == "time" and action_a and action_b and action_a != action_b:
            return False
        return True

    @staticmethod
    def _normalized(claim: Claim) -> float | None:
        value = _as_float(claim.normalized_value)
        if value is None:
            return None
        return units.normalize(value, claim.unit or "")[0]

    def _agree(self, a: float, b: float) -> bool:
        return math.isclose(a, b, rel_tol=max(self._tolerance, 1e-9), abs_tol=1e-9)

    def _has_scenario_cue(self, text: str, claim: Claim) -> bool:
        span = try_parse(claim.source_locator)
        if span is None or not text:
            return False
        start, end = span
        window = text[max(0, start - self._scenario_window) : end + self._scenario_window]
        return MULTI_SCENARIO_PATTERN.search(window) is not None
