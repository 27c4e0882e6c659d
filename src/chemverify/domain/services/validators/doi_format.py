"""
DOI format validation against the identifier's structural grammar.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chemverify.domain.entities import ClaimType, FindingKind, ValidationStatus
from chemverify.domain.services.validators.base import ValidatorBase

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun

DOI_FORMAT_PATTERN = re.compile(r"^10\.\d{4,9}/[-._;()/:A-Z0-9]+$", re.IGNORECASE)
MAX_DOI_LENGTH = 256


class DoiFormatValidator(ValidatorBase):
    """Pass for well-formed DOIs, Fail for malformed ones."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        findings: list[Finding] = []
        for claim in claims:
            if claim.claim_type != ClaimType.CITATION_DOI:
                continue
            doi = claim.normalized_value or claim.raw_text
            if len(doi) <= MAX_DOI_LENGTH and DOI_FORMAT_PATTERN.match(doi):
                findings.append(
                    self._finding(
                        run_id,
                        ValidationStatus.PASS,
                        f"DOI format is valid: {claim.raw_text}",
                        1.0,
                        claim=claim,
                    )
                )
            else:
                findings.append(
                    self._finding(
                        run_id,
                        ValidationStatus.FAIL,
                        f"DOI format is invalid: {claim.raw_text}",
                        0.9,
                        kind=FindingKind.INVALID_IDENTIFIER,
                        claim=claim,
                    )
                )
        return findings
