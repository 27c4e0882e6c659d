"""
RunRepository Port
==================

Abstract interface for persisting terminal audit runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.results import AuditArtifact
    from chemverify.domain.run import AuditRun


class RunRepository(ABC):
    """
    Port for run storage.

    Runs are saved together with their claims and findings as one unit
    and are treated as immutable afterwards.
    """

    @abstractmethod
    async def save_run(self, run: AuditRun, claims: list[Claim], findings: list[Finding]) -> None:
        """Persist a run with its claims and findings atomically."""
        ...

    @abstractmethod
    async def get_artifact(self, run_id: UUID) -> AuditArtifact | None:
        """
        Load the artifact for a run.

        Returns:
            The artifact, or None if the run is unknown.
        """
        ...

    @abstractmethod
    async def list_runs(self, skip: int = 0, take: int = 50) -> list[AuditRun]:
        """List runs, newest first."""
        ...
