"""
Domain Layer
============

Core audit entities and value objects.
These are persistence-agnostic and contain no infrastructure dependencies.
"""

from chemverify.domain.entities import (
    Claim,
    ClaimType,
    Finding,
    FindingKind,
    ValidationStatus,
)
from chemverify.domain.results import AuditArtifact
from chemverify.domain.run import (
    AuditCommand,
    AuditRun,
    OutputContract,
    PolicySettings,
    RunMode,
    RunStatus,
)

__all__ = [
    # Entities
    "Claim",
    "ClaimType",
    "Finding",
    "FindingKind",
    "ValidationStatus",
    # Runs
    "AuditCommand",
    "AuditRun",
    "OutputContract",
    "PolicySettings",
    "RunMode",
    "RunStatus",
    # Results
    "AuditArtifact",
]
