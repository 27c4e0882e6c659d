"""
Procedure Ordering Validators
=============================

Checks that depend on the order of procedure steps: reactive reagents
must be followed by a quench or workup, and dry/inert conditions must
not meet aqueous media without a workup transition in between.

Both rules only look at steps classified as procedure steps, so
literature discussion and reference lists do not trigger them.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chemverify.domain.entities import ClaimType, FindingKind, ValidationStatus
from chemverify.domain.services.evidence_locator import try_parse
from chemverify.domain.services.validators.base import StepAnalysis, ValidatorBase

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun

REACTIVE_ROLES = frozenset({"reductant", "base", "organometallic"})

_QUENCH_CORE = (
    r"quench(?:ed|ing)?|work[- ]?up|extract(?:ed|ion)|wash(?:ed|ing)?|"
    r"pour(?:ed)?\s+(?:into|onto)|"
    r"added?\s+(?:to\s+)?(?:ice|water|sat\w*\s+NH4Cl|sat\w*\s+NaHCO3|brine)|"
    r"neutrali[sz](?:ed|ing)?"
)
QUENCH_WORKUP_PATTERN = re.compile(rf"\b(?:{_QUENCH_CORE})\b", re.IGNORECASE)
WORKUP_TRANSITION_PATTERN = re.compile(
    rf"\b(?:{_QUENCH_CORE}|partition(?:ed)?|separate(?:d|ing)?|organic\s+layer|aqueous\s+layer)\b",
    re.IGNORECASE,
)
AQUEOUS_MEDIA_PATTERN = re.compile(
    r"\b(?:water|H2O|brine|aqueous|sat\w*\s+(?:NaCl|NH4Cl|NaHCO3))\b", re.IGNORECASE
)


def _claim_start(claim: Claim) -> int | None:
    span = try_parse(claim.source_locator)
    return span[0] if span else None


class QuenchWhenReactiveReagentValidator(ValidatorBase):
    """Reactive reagents with no quench or workup afterwards."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        analysis = StepAnalysis.of(text)
        if not analysis.context.is_procedural:
            return []
        boundary = analysis.context.references_start
        if boundary is None:
            boundary = len(text)

        reactives = [
            claim
            for claim in claims
            if claim.claim_type == ClaimType.REAGENT_MENTION
            and claim.payload.get("role") in REACTIVE_ROLES
            and (_claim_start(claim) is None or _claim_start(claim) < boundary)
            and analysis.is_procedure(claim.step_index)
        ]
        if not reactives:
            return []

        last_step = max(claim.step_index or 0 for claim in reactives)
        if self._has_quench_after(analysis, reactives, last_step, boundary):
            return []

        tokens = ", ".join(dict.fromkeys(claim.raw_text for claim in reactives))
        return [
            self._finding(
                run_id,
                ValidationStatus.FAIL,
                f"[CHEM.MISSING_QUENCH] Reactive reagent ({tokens}) detected "
                "but no quench/workup step found.",
                0.85,
                kind=FindingKind.MISSING_QUENCH,
                claim=reactives[-1],
                payload={"reagents": tokens, "last_reactive_step": last_step},
            )
        ]

    @staticmethod
    def _has_quench_after(
        analysis: StepAnalysis, reactives: list[Claim], last_step: int, boundary: int
    ) -> bool:
        for step in analysis.steps:
            if step.start >= boundary:
                break
            if step.index <= last_step:
                continue
            if QUENCH_WORKUP_PATTERN.search(analysis.text[step.start : min(step.end, boundary)]):
                return True

        # Quench phrasing later in the same step ("NaBH4 was added ... then quenched")
        same_step = [c for c in reactives if (c.step_index or 0) == last_step]
        span = try_parse(same_step[-1].source_locator)
        step = next((s for s in analysis.steps if s.index == last_step), None)
        if span is None or step is None or span[1] <= step.start:
            return False
        tail = analysis.text[span[1] : min(step.end, boundary)]
        return QUENCH_WORKUP_PATTERN.search(tail) is not None


class DryInertMismatchValidator(ValidatorBase):
    """Dry or inert conditions followed by aqueous media with no workup transition."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        dry_claims = [
            claim
            for claim in claims
            if claim.claim_type in (ClaimType.DRYNESS_CONDITION, ClaimType.ATMOSPHERE_CONDITION)
            and claim.normalized_value != "air"
        ]
        if not dry_claims:
            return []

        dry_step = min(claim.step_index or 0 for claim in dry_claims)
        analysis = StepAnalysis.of(text)
        later_steps = [s for s in analysis.procedure_steps() if s.index > dry_step]

        for position, step in enumerate(later_steps):
            step_text = analysis.step_text(step)
            aqueous = AQUEOUS_MEDIA_PATTERN.search(step_text)
            if aqueous is None:
                continue
            # A workup phrase in this step or any procedure step before it
            if any(
                WORKUP_TRANSITION_PATTERN.search(analysis.step_text(s))
                for s in later_steps[: position + 1]
            ):
                continue

            tokens = ", ".join(dict.fromkeys(claim.raw_text for claim in dry_claims))
            start = step.start + aqueous.start()
            return [
                self._finding(
                    run_id,
                    ValidationStatus.FAIL,
                    f"[CHEM.DRY_INERT_MISMATCH] Dry/inert conditions ({tokens}) established in "
                    f"step {dry_step}, but aqueous media introduced in step {step.index} "
                    "without explicit workup transition.",
                    0.7,
                    kind=FindingKind.DRY_INERT_MISMATCH,
                    evidence_ref=f"AnalyzedText:{start}-{start + len(aqueous.group(0))}",
                    payload={"dry_tokens": tokens, "dry_step": dry_step, "aqueous_step": step.index},
                )
            ]
        return []
