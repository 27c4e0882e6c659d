"""
Validator Port
==============

Abstract interface for an independent rule check over the claim set.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun


class Validator(ABC):
    """
    Port for claim validation.

    Validators see the full claim set and the run, never mutate either,
    and may run in any order. Policies include or exclude them by name.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        """
        Check claims and emit findings.

        Args:
            run_id: Run being audited.
            claims: Every claim extracted for the run.
            run: The run itself, for access to the analyzed text.

        Returns:
            Zero or more findings.
        """
        ...
