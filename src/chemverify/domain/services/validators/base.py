"""
Validator Base
==============

Shared plumbing for concrete validators: finding construction with the
validator name filled in, and the step/role analysis several procedure
rules need.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chemverify.domain.entities import Finding, FindingKind, ValidationStatus
from chemverify.domain.services.text_steps import (
    ProceduralContext,
    StepRole,
    TextStep,
    classify_step_roles,
    detect_procedural_context,
    segment_steps,
)
from chemverify.ports.validator import Validator

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim


@dataclass(frozen=True, slots=True)
class StepAnalysis:
    """Steps of a text with their roles and procedural context."""

    text: str
    steps: list[TextStep]
    context: ProceduralContext
    roles: dict[int, StepRole]

    @classmethod
    def of(cls, text: str) -> StepAnalysis:
        steps = segment_steps(text)
        context = detect_procedural_context(text, steps)
        roles = classify_step_roles(text, steps, context.references_start)
        return cls(text, steps, context, roles)

    def step_text(self, step: TextStep) -> str:
        return self.text[step.start : step.end]

    def is_procedure(self, step_index: int | None) -> bool:
        if step_index is None:
            return True
        return self.roles.get(step_index) == StepRole.PROCEDURE

    def procedure_steps(self) -> list[TextStep]:
        return [step for step in self.steps if self.roles.get(step.index) == StepRole.PROCEDURE]


class ValidatorBase(Validator):
    """Base class that stamps findings with the validator name."""

    def _finding(
        self,
        run_id: UUID,
        status: ValidationStatus,
        message: str,
        confidence: float,
        *,
        kind: FindingKind | None = None,
        claim: Claim | None = None,
        evidence_ref: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Finding:
        if evidence_ref is None and claim is not None:
            evidence_ref = claim.source_locator
        return Finding(
            run_id=run_id,
            claim_id=claim.id if claim is not None else None,
            validator_name=self.name,
            status=status,
            kind=kind,
            message=message,
            confidence=confidence,
            evidence_ref=evidence_ref,
            payload=payload or {},
        )
