"""
In-Memory Run Repository
========================

Process-local run storage. Runs are stored as deep copies so later
mutation by a caller cannot alter what was persisted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chemverify.domain.services.canonicalizer import build_artifact
from chemverify.ports.repository import RunRepository

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.results import AuditArtifact
    from chemverify.domain.run import AuditRun

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _StoredRun:
    run: AuditRun
    claims: tuple[Claim, ...]
    findings: tuple[Finding, ...]


class InMemoryRunRepository(RunRepository):
    """Dictionary-backed repository guarded by an asyncio lock."""

    def __init__(self) -> None:
        self._runs: dict[UUID, _StoredRun] = {}
        self._lock = asyncio.Lock()

    async def save_run(self, run: AuditRun, claims: list[Claim], findings: list[Finding]) -> None:
        stored = _StoredRun(
            run=run.model_copy(deep=True),
            claims=tuple(claims),
            findings=tuple(findings),
        )
        async with self._lock:
            self._runs[run.id] = stored
        logger.debug(f"Saved run {run.id} ({len(claims)} claims, {len(findings)} findings)")

    async def get_artifact(self, run_id: UUID) -> AuditArtifact | None:
        async with self._lock:
            stored = self._runs.get(run_id)
        if stored is None:
            return None
        return build_artifact(
            stored.run.model_copy(deep=True), list(stored.claims), list(stored.findings)
        )

    async def list_runs(self, skip: int = 0, take: int = 50) -> list[AuditRun]:
        if skip < 0 or take < 0:
            raise ValueError("skip and take must be non-negative")
        async with self._lock:
            runs = [stored.run for stored in self._runs.values()]
        runs.sort(key=lambda r: r.created_at, reverse=True)
        return [r.model_copy(deep=True) for r in runs[skip : skip + take]]

    def __len__(self) -> int:
        return len(self._runs)
