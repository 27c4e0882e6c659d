"""
DOI Extractor
=============

Permissive capture of DOI-like strings. Strict format checking is left
to the DOI format validator so malformed identifiers still surface as
claims.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chemverify.domain.entities import Claim, ClaimType
from chemverify.domain.services.evidence_locator import format_locator
from chemverify.ports.claim_extractor import ClaimExtractor

if TYPE_CHECKING:
    from uuid import UUID

DOI_PATTERN = re.compile(r"10\.\d{4,9}/\S+", re.IGNORECASE)

# Markdown and URL delimiters that end a DOI
_DELIMITERS = re.compile(r"[\])\"'<>]")
_TRAILING_PUNCTUATION = ".,;:"


class DoiExtractor(ClaimExtractor):
    """Extracts citation DOIs, de-duplicated case-insensitively."""

    def extract(self, run_id: UUID, text: str) -> list[Claim]:
        if not text:
            return []

        claims: list[Claim] = []
        seen: set[str] = set()

        for match in DOI_PATTERN.finditer(text):
            raw = match.group(0)
            delimiter = _DELIMITERS.search(raw)
            if delimiter:
                raw = raw[: delimiter.start()]
            raw = raw.rstrip(_TRAILING_PUNCTUATION)

            normalized = raw.lower()
            if normalized in seen:
                continue
            seen.add(normalized)

            claims.append(
                Claim(
                    run_id=run_id,
                    claim_type=ClaimType.CITATION_DOI,
                    raw_text=raw,
                    normalized_value=normalized,
                    source_locator=format_locator(match.start(), match.start() + len(raw)),
                )
            )

        return claims
