"""
Domain Results
==============

The audit artifact handed back to callers once a run is terminal.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from chemverify.domain.entities import Claim, Finding, ValidationStatus
from chemverify.domain.run import AuditRun


class AuditArtifact(BaseModel):
    """
    Run, claims and findings bundled with an integrity digest.

    The artifact hash covers a canonical projection of the pipeline
    result and is independent from the run's content hash.
    """

    run: AuditRun
    claims: list[Claim] = Field(default_factory=list)
    findings: list[Finding] = Field(default_factory=list)
    artifact_hash: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}

    @property
    def failed_count(self) -> int:
        return sum(1 for f in self.findings if f.status == ValidationStatus.FAIL)

    @property
    def unverified_count(self) -> int:
        return sum(1 for f in self.findings if f.status == ValidationStatus.UNVERIFIED)
