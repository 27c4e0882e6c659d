"""
Canonicalizer & Hash Service
============================

Deterministic text and JSON normalization feeding the run content hash
and the artifact hash. Semantically identical inputs always produce
identical digests.
"""

from __future__ import annotations

import hashlib
import json
import unicodedata
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from chemverify.domain.results import AuditArtifact

if TYPE_CHECKING:
    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun


def canonicalize(text: str | None) -> str:
    """
    Normalize text for hashing.

    Unifies line endings, applies Unicode NFC, strips trailing
    whitespace on each line and trims the text as a whole.
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFC", text)
    normalized = normalized.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip() for line in normalized.split("\n")]
    return "\n".join(lines).strip()


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonicalize_json(value: Any) -> str:
    """Serialize with sorted keys and compact separators."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )


def compute_hash(text: str) -> str:
    """SHA-256 of the UTF-8 text as lower-case hex."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_run_hash(
    previous_hash: str | None,
    prompt: str | None,
    output: str | None,
    created_at: datetime,
    model_name: str,
) -> str:
    """Content hash linking a run to the previous run in its chain."""
    material = (
        (previous_hash or "")
        + canonicalize(prompt)
        + canonicalize(output)
        + created_at.isoformat()
        + model_name
    )
    return compute_hash(material)


def compute_fallback_hash(prompt: str | None, created_at: datetime) -> str:
    """Reduced content hash for runs that failed before hashing."""
    return compute_hash(canonicalize(prompt) + created_at.isoformat())


def compute_artifact_hash(run: AuditRun, claim_count: int, finding_count: int) -> str:
    projection = {
        "run_id": run.id,
        "current_hash": run.current_hash,
        "created_at": run.created_at,
        "model_name": run.model_name,
        "risk_score": run.risk_score,
        "claim_count": claim_count,
        "finding_count": finding_count,
    }
    return compute_hash(canonicalize_json(projection))


def build_artifact(
    run: AuditRun,
    claims: list[Claim],
    findings: list[Finding],
    generated_at: datetime | None = None,
) -> AuditArtifact:
    """Assemble the artifact for a terminal run."""
    artifact_hash = compute_artifact_hash(run, len(claims), len(findings))
    extra = {"generated_at": generated_at} if generated_at is not None else {}
    return AuditArtifact(
        run=run,
        claims=list(claims),
        findings=list(findings),
        artifact_hash=artifact_hash,
        **extra,
    )
