"""
Audit Report View
=================

A small derived view over an artifact: severity tier, a one-line
verdict and categorized messages. Rendering is left to callers.
"""

from __future__ import annotations

from enum import StrEnum, auto
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from chemverify.domain.entities import FindingKind, ValidationStatus
from chemverify.domain.run import RunStatus

if TYPE_CHECKING:
    from chemverify.domain.entities import Finding
    from chemverify.domain.results import AuditArtifact


class SeverityTier(StrEnum):
    """Risk tier derived from the risk score."""

    LOW = auto()
    MEDIUM = auto()
    HIGH = auto()
    CRITICAL = auto()


# Upper bounds, inclusive
SEVERITY_THRESHOLDS = (
    (0.10, SeverityTier.LOW),
    (0.35, SeverityTier.MEDIUM),
    (0.65, SeverityTier.HIGH),
)


def classify_severity(risk_score: float) -> SeverityTier:
    for bound, tier in SEVERITY_THRESHOLDS:
        if risk_score <= bound:
            return tier
    return SeverityTier.CRITICAL


class AuditReport(BaseModel):
    """Human-oriented summary of one audit artifact."""

    risk_score: float = Field(..., ge=0.0, le=1.0)
    severity: SeverityTier
    verdict: str
    claim_count: int = 0
    confirmed: list[str] = Field(default_factory=list)
    failures: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    not_verifiable: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


def _verdict(artifact: AuditArtifact, severity: SeverityTier) -> str:
    if artifact.run.status == RunStatus.FAILED:
        return "Audit failed before completion; treat the output as unverified."
    failed = artifact.failed_count
    if failed == 0 and severity == SeverityTier.LOW:
        return "No issues detected in the extracted claims."
    if failed == 0:
        return f"No failed checks, but {artifact.unverified_count} claims could not be verified."
    noun = "check" if failed == 1 else "checks"
    return f"{failed} {noun} failed; review the flagged claims before relying on this text."


def _with_evidence(finding: Finding) -> str:
    if finding.evidence_snippet:
        return f"{finding.message} (evidence: {finding.evidence_snippet})"
    return finding.message


def build_report(artifact: AuditArtifact) -> AuditReport:
    """Derive the report view from an artifact."""
    severity = classify_severity(artifact.run.risk_score)
    raw_by_claim = {claim.id: claim.raw_text for claim in artifact.claims}

    confirmed: list[str] = []
    failures: list[str] = []
    warnings: list[str] = []
    not_checkable: list[str] = []

    for finding in artifact.findings:
        if finding.status == ValidationStatus.PASS:
            confirmed.append(finding.message)
        elif finding.status == ValidationStatus.FAIL:
            failures.append(_with_evidence(finding))
        elif finding.kind == FindingKind.NOT_CHECKABLE:
            raw = raw_by_claim.get(finding.claim_id) if finding.claim_id else None
            if raw:
                not_checkable.append(raw)
        elif finding.kind != FindingKind.NOT_COMPARABLE:
            warnings.append(_with_evidence(finding))

    not_verifiable = []
    if not_checkable:
        not_verifiable.append(
            f"Single-instance numeric claims ({', '.join(not_checkable)}); "
            "no cross-reference available"
        )

    return AuditReport(
        risk_score=artifact.run.risk_score,
        severity=severity,
        verdict=_verdict(artifact, severity),
        claim_count=len(artifact.claims),
        confirmed=confirmed,
        failures=failures,
        warnings=warnings,
        not_verifiable=not_verifiable,
    )
