"""
Evidence Locator
================

Resolves claims and findings back to a character span and a readable
snippet of the analyzed text. Malformed locators resolve to "no span"
and never raise.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chemverify.domain.services.text_steps import segment_steps, step_index_at

if TYPE_CHECKING:
    from chemverify.domain.entities import Claim, Finding

LOCATOR_SOURCE = "AnalyzedText"
_PREFIX = f"{LOCATOR_SOURCE}:"
ELLIPSIS = "…"
DEFAULT_SNIPPET_RADIUS = 30
_BOUND_PATTERN = re.compile(r"\d+", re.ASCII)


def format_locator(start: int, end: int) -> str:
    return f"{_PREFIX}{start}-{end}"


def try_parse(locator: str | None) -> tuple[int, int] | None:
    """
    Parse ``AnalyzedText:<start>-<end>``.

    Returns:
        ``(start, end)`` or None when the prefix, separator or bounds
        are malformed, or when ``end < start``.
    """
    if not locator or not locator.startswith(_PREFIX):
        return None
    start_text, sep, end_text = locator[len(_PREFIX) :].partition("-")
    if not sep:
        return None
    if not _BOUND_PATTERN.fullmatch(start_text) or not _BOUND_PATTERN.fullmatch(end_text):
        return None
    start, end = int(start_text), int(end_text)
    if end < start:
        return None
    return start, end


def extract_snippet(
    text: str | None, start: int, end: int, radius: int = DEFAULT_SNIPPET_RADIUS
) -> str | None:
    """
    Return ``text[start:end]`` padded by ``radius`` characters per side.

    Ellipsis markers show where surrounding text was cut. Returns None
    for an out-of-range or inverted span.
    """
    if not text or start < 0 or end < start or start > len(text):
        return None
    end = min(end, len(text))
    radius = max(radius, 0)

    left = max(0, start - radius)
    right = min(len(text), end + radius)
    snippet = text[left:right]
    if left > 0:
        snippet = ELLIPSIS + snippet
    if right < len(text):
        snippet = snippet + ELLIPSIS
    return snippet


def enrich_findings(
    findings: list[Finding],
    claims: list[Claim],
    text: str | None,
    radius: int = DEFAULT_SNIPPET_RADIUS,
) -> list[Finding]:
    """
    Attach evidence span, snippet, step and entity to each finding.

    The span comes from the finding's claim locator when the claim is
    known, otherwise from the finding's own evidence reference.
    Findings without a resolvable span are returned unchanged.
    """
    if not text:
        return list(findings)

    claims_by_id = {claim.id: claim for claim in claims}
    steps = segment_steps(text)
    enriched: list[Finding] = []

    for finding in findings:
        claim = claims_by_id.get(finding.claim_id) if finding.claim_id else None
        span = try_parse(claim.source_locator) if claim else None
        if span is None:
            span = try_parse(finding.evidence_ref)
        if span is None or span[1] > len(text):
            enriched.append(finding)
            continue

        start, end = span
        step_index = claim.step_index if claim and claim.step_index is not None else None
        if step_index is None:
            step_index = step_index_at(steps, start)
        enriched.append(
            finding.model_copy(
                update={
                    "evidence_start": start,
                    "evidence_end": end,
                    "evidence_step_index": step_index,
                    "evidence_entity_key": claim.entity_key if claim else None,
                    "evidence_snippet": extract_snippet(text, start, end, radius),
                }
            )
        )
    return enriched
