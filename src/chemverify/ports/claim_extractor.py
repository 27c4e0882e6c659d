"""
ClaimExtractor Port
===================

Abstract interface for turning analyzed text into typed claims.
Implementations are pattern matchers with no side effects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim


class ClaimExtractor(ABC):
    """
    Port for claim extraction.

    Responsibilities:
    - Match one family of claims (numbers with units, DOIs, reagents)
    - Record the character span of every match as a source locator
    - Return an empty list for empty or unparseable text
    """

    @property
    def name(self) -> str:
        """Name used for diagnostics when extraction fails."""
        return type(self).__name__

    @abstractmethod
    def extract(self, run_id: UUID, text: str) -> list[Claim]:
        """
        Extract claims from text.

        Args:
            run_id: Run the claims belong to.
            text: Analyzed text.

        Returns:
            Claims in order of appearance.
        """
        ...
