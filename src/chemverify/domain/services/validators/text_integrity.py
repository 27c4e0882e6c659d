"""
Text Integrity Validators
=========================

Surface-level checks on the analyzed text itself: malformed chemical
tokens, placeholder gaps left by lost formatting, claims left incomplete
and mixed citation styles.
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

EMPTY_PARENS_PATTERN = re.compile(r"\b[A-Z][a-zA-Z0-9]+\s*\(\s*\)")
STANDALONE_DEGREE_PATTERN = re.compile(r"(?<!\d)(?<!\d\s)°C")
DANGLING_FORMATTING_PATTERN = re.compile(r"(?<!\w)_(?!\w)|(?<!`)`(?!`)|\\(?=[,.\s]|$)")

EG_WITHOUT_NUMBER_PATTERN = re.compile(
    r"e\.g\.[\s,]*(?:(?:°C|mL|mg|g|mol|mmol|µL|µg|kPa|atm)\b|%)(?!\s*\d)"
)
COMPARATIVE_SENTENCE_PATTERN = re.compile(r"[^.!?]*\b\w+\s*>\s*\w+[^.!?]*[.!?]")
CITATION_MARKER_PATTERN = re.compile(
    r"10\.\d{4,9}/|\(\s*[A-Z][a-z]+(?:\s+(?:&|and)\s+[A-Z][a-z]+)*(?:\s+et\s+al\.?)?"
    r"\s*[,;]\s*\d{4}\s*\)|\[\d+\]"
)
AUTHOR_YEAR_PATTERN = re.compile(r"\(\s*[A-Z][a-z]+(?:\s+et\s+al\.?)?\s*[,;]\s*\d{4}\s*\)")

# Patterns for values lost in copy-paste, each with the reason reported.
PLACEHOLDER_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"\b(?:under|with|in|over|from|using|via|of)\s+[.,;:]", re.IGNORECASE),
        "Preposition followed by punctuation, likely a missing value",
    ),
    (
        re.compile(
            r"\(\s*(?:mL|mmol|mol|mg|g|kg|µ?L|°C|equiv|eq|h|min|atm|M)\s*\)", re.IGNORECASE
        ),
        "Parenthesized unit with no numeric value",
    ),
    (re.compile(r"\*{3,}"), "Consecutive asterisks mask a missing value"),
    (
        re.compile(r"\bnew\s{2,}bond\b", re.IGNORECASE),
        "Blank gap before \"bond\", likely a dropped bond descriptor",
    ),
    (
        re.compile(r"\b(?:in|of)\s+%\s*(?:yield|conversion|ee)\b", re.IGNORECASE),
        "Percent sign without a preceding number",
    ),
    (
        re.compile(r"\(\s*%\s+[A-Za-z]"),
        "Percent inside parentheses without a composition value",
    ),
)


class MalformedChemicalTokenValidator(ValidatorBase):
    """Flags empty parentheses, unit symbols without a value and stray markup."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        findings: list[Finding] = []
        for match in EMPTY_PARENS_PATTERN.finditer(text):
            findings.append(self._malformed(run_id, match, "Chemical name followed by empty parentheses"))
        for match in STANDALONE_DEGREE_PATTERN.finditer(text):
            findings.append(
                self._malformed(
                    run_id,
                    match,
                    "Standalone °C without numeric value",
                    payload={
                        "expected": "temperature numeric value",
                        "examples": ["0 °C", "25 °C", "-78 °C"],
                        "token": "°C",
                    },
                )
            )
        for match in DANGLING_FORMATTING_PATTERN.finditer(text):
            findings.append(self._malformed(run_id, match, "Dangling markdown/LaTeX formatting fragment"))
        return findings

    def _malformed(
        self, run_id: UUID, match: re.Match[str], detail: str, payload: dict | None = None
    ) -> Finding:
        return self._finding(
            run_id,
            ValidationStatus.FAIL,
            f'[TEXT.MALFORMED_CHEMICAL_TOKEN] {detail}: "{match.group(0)}" '
            f"at position {match.start()}.",
            0.8,
            kind=FindingKind.MALFORMED_CHEMICAL_TOKEN,
            evidence_ref=format_locator(match.start(), match.end()),
            payload=payload,
        )


class IncompleteScientificClaimValidator(ValidatorBase):
    """Flags "e.g." examples with no value and uncited comparative chains."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        findings: list[Finding] = []
        for match in EG_WITHOUT_NUMBER_PATTERN.finditer(text):
            findings.append(
                self._finding(
                    run_id,
                    ValidationStatus.FAIL,
                    f'[TEXT.INCOMPLETE_CLAIM] "e.g." followed by unit without numeric value: '
                    f'"{match.group(0).strip()}" at position {match.start()}.',
                    0.75,
                    kind=FindingKind.INCOMPLETE_CLAIM,
                    evidence_ref=format_locator(match.start(), match.end()),
                )
            )

        for match in COMPARATIVE_SENTENCE_PATTERN.finditer(text):
            if CITATION_MARKER_PATTERN.search(match.group(0)):
                continue
            findings.append(
                self._finding(
                    run_id,
                    ValidationStatus.FAIL,
                    f'[TEXT.INCOMPLETE_CLAIM] Comparative chain (">") without nearby citation '
                    f"in sentence at position {match.start()}.",
                    0.7,
                    kind=FindingKind.INCOMPLETE_CLAIM,
                    evidence_ref=format_locator(match.start(), match.end()),
                )
            )
        return findings


class MixedCitationStyleValidator(ValidatorBase):
    """DOI citations mixed with author-year citations weaken traceability."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        has_doi = any(c.claim_type == ClaimType.CITATION_DOI for c in claims)
        author_year = AUTHOR_YEAR_PATTERN.search(text)
        if not has_doi or author_year is None:
            return []

        return [
            self._finding(
                run_id,
                ValidationStatus.UNVERIFIED,
                "[TEXT.CITATION_TRACEABILITY_WEAK] Document mixes DOI citations and "
                "author-year citations, reducing traceability.",
                0.85,
                kind=FindingKind.CITATION_TRACEABILITY_WEAK,
                evidence_ref=format_locator(author_year.start(), author_year.end()),
            )
        ]


class PlaceholderTokenValidator(ValidatorBase):
    """Flags template artifacts such as "under .", "( mL)", "****" or "in % yield"."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        findings: list[Finding] = []
        for pattern, detail in PLACEHOLDER_PATTERNS:
            for match in pattern.finditer(text):
                findings.append(
                    self._finding(
                        run_id,
                        ValidationStatus.FAIL,
                        f'[TEXT.PLACEHOLDER_OR_MISSING_TOKEN] {detail}: "{match.group(0)}" '
                        f"at position {match.start()}.",
                        0.7,
                        kind=FindingKind.PLACEHOLDER_OR_MISSING_TOKEN,
                        evidence_ref=format_locator(match.start(), match.end()),
                    )
                )
        return findings
