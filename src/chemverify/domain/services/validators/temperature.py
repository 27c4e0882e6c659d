"""
Missing-temperature check for text that implies thermal control.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chemverify.domain.entities import ClaimType, FindingKind, ValidationStatus
from chemverify.domain.services.evidence_locator import format_locator
from chemverify.domain.services.validators.base import ValidatorBase

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun

# "reflux" and "ice bath" are symbolic temperatures, so they satisfy the rule
IMPLIED_TEMPERATURE_PATTERN = re.compile(
    r"\b(?:dropwise|exotherm(?:ic)?|cooling\s+bath|cryogenic|heated\s+to|cooled\s+to|"
    r"warmed\s+to|kept\s+at\s+(?!rt\b|room|ambient)|stirred\s+at\s+(?!rt\b|room|ambient))",
    re.IGNORECASE,
)


class MissingTemperatureWhenImpliedValidator(ValidatorBase):
    """Heating or cooling language without any stated temperature."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        implied = IMPLIED_TEMPERATURE_PATTERN.search(text)
        if implied is None:
            return []

        has_temperature = any(
            c.claim_type == ClaimType.SYMBOLIC_TEMPERATURE or c.context_key == "temp"
            for c in claims
        )
        if has_temperature:
            return []

        phrase = implied.group(0).strip()
        return [
            self._finding(
                run_id,
                ValidationStatus.FAIL,
                f"[CHEM.MISSING_TEMPERATURE] Temperature control is implied (e.g., {phrase}) "
                "but no temperature was specified.",
                0.85,
                kind=FindingKind.MISSING_TEMPERATURE,
                evidence_ref=format_locator(implied.start(), implied.start() + len(phrase)),
            )
        ]
