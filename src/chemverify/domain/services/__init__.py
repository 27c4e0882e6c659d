"""
Domain Services
===============

Pure pipeline services: canonicalization and hashing, evidence
location, scoring, policy resolution and reporting. Extractors and
validators live in their own subpackages.
"""

from chemverify.domain.services.canonicalizer import (
    build_artifact,
    canonicalize,
    canonicalize_json,
    compute_artifact_hash,
    compute_fallback_hash,
    compute_hash,
    compute_run_hash,
)
from chemverify.domain.services.evidence_locator import (
    enrich_findings,
    extract_snippet,
    format_locator,
    try_parse,
)
from chemverify.domain.services.policy import (
    BUILTIN_PROFILES,
    DEFAULT_POLICY,
    PolicyProfileResolver,
)
from chemverify.domain.services.report import (
    AuditReport,
    SeverityTier,
    build_report,
    classify_severity,
)
from chemverify.domain.services.scorer import DEFAULT_WEIGHTS, RiskScorer, ScoringWeights

__all__ = [
    # Canonicalizer
    "build_artifact",
    "canonicalize",
    "canonicalize_json",
    "compute_artifact_hash",
    "compute_fallback_hash",
    "compute_hash",
    "compute_run_hash",
    # Evidence
    "enrich_findings",
    "extract_snippet",
    "format_locator",
    "try_parse",
    # Policy
    "BUILTIN_PROFILES",
    "DEFAULT_POLICY",
    "PolicyProfileResolver",
    # Report
    "AuditReport",
    "SeverityTier",
    "build_report",
    "classify_severity",
    # Scoring
    "DEFAULT_WEIGHTS",
    "RiskScorer",
    "ScoringWeights",
]
