"""
Domain Entities
===============

Claims and findings produced by the audit pipeline.
These are immutable value objects with no infrastructure dependencies.
"""

from __future__ import annotations

from enum import StrEnum, auto
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ClaimType(StrEnum):
    """Classification of an extracted claim."""

    CITATION_DOI = auto()  # "10.1021/acs.orglett.1c02345"
    NUMERIC_WITH_UNIT = auto()  # "78 °C", "80-85%"
    REAGENT_MENTION = auto()  # "NaBH4" tagged as reductant
    SOLVENT_MENTION = auto()  # "THF", "methanol"
    ATMOSPHERE_CONDITION = auto()  # "under argon"
    DRYNESS_CONDITION = auto()  # "anhydrous", "flame-dried"
    SYMBOLIC_TEMPERATURE = auto()  # "reflux", "ice bath"


class ValidationStatus(StrEnum):
    """Verdict a validator reaches about one or more claims."""

    PASS = auto()
    FAIL = auto()
    UNVERIFIED = auto()


class FindingKind(StrEnum):
    """Tag describing why a finding has its status."""

    NOT_CHECKABLE = auto()  # Only one mention, nothing to cross-reference
    NOT_COMPARABLE = auto()  # Context has no comparison rule
    MULTI_SCENARIO = auto()  # Differing values describe separate experiments
    CONTRADICTION = auto()
    EXTRACTION_FAILURE = auto()
    VALIDATOR_FAILURE = auto()
    PIPELINE_FAILURE = auto()
    INVALID_IDENTIFIER = auto()
    INCOMPATIBLE_REAGENT_SOLVENT = auto()
    MISSING_SOLVENT = auto()
    MISSING_TEMPERATURE = auto()
    MALFORMED_CHEMICAL_TOKEN = auto()
    INCOMPLETE_CLAIM = auto()
    CITATION_TRACEABILITY_WEAK = auto()
    MISSING_QUENCH = auto()
    DRY_INERT_MISMATCH = auto()
    EQUIVALENTS_INCONSISTENT = auto()
    PLACEHOLDER_OR_MISSING_TOKEN = auto()  # Template artifact such as "under ." or "( mL)"
    YIELD_MASS_INCONSISTENT = auto()
    MW_CONSISTENT = auto()
    MW_IMPLAUSIBLE = auto()
    KNOWN_REAGENT_FORM = auto()  # Commercial form such as "HCl in dioxane"


class Claim(BaseModel):
    """
    A discrete factual assertion extracted from analyzed text.

    The source locator names the character span the claim was matched
    from (``AnalyzedText:<start>-<end>``). The payload carries
    kind-dependent structure such as the context key, range bounds
    or reagent role.
    """

    id: UUID = Field(default_factory=uuid4)
    run_id: UUID
    claim_type: ClaimType
    raw_text: str = Field(..., description="Text exactly as matched")
    normalized_value: str | None = Field(default=None, description="Canonical value")
    unit: str | None = Field(default=None, description="Normalized unit symbol")
    source_locator: str | None = Field(
        default=None, description="Character span in the analyzed text"
    )
    step_index: int | None = Field(default=None, ge=0, description="Procedure step")
    entity_key: str | None = Field(
        default=None, description="Entity the value is attached to"
    )
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def context_key(self) -> str | None:
        """Domain tag used to group numeric claims (e.g. ``temp``)."""
        return self.payload.get("context_key")

    @property
    def is_range(self) -> bool:
        return "range_low" in self.payload and "range_high" in self.payload


class Finding(BaseModel):
    """
    A validator's verdict about one claim or about the text as a whole.

    Evidence fields are filled in after validation by the evidence
    locator; enrichment produces a new instance.
    """

    id: UUID = Field(default_factory=uuid4)
    run_id: UUID
    claim_id: UUID | None = None
    validator_name: str
    status: ValidationStatus
    kind: FindingKind | None = None
    message: str
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    evidence_ref: str | None = Field(
        default=None, description="Locator of the text that triggered the finding"
    )
    payload: dict[str, Any] = Field(default_factory=dict)

    # Evidence enrichment
    evidence_start: int | None = None
    evidence_end: int | None = None
    evidence_step_index: int | None = None
    evidence_entity_key: str | None = None
    evidence_snippet: str | None = None

    model_config = {"frozen": True}

    @property
    def has_evidence(self) -> bool:
        return self.evidence_start is not None and self.evidence_end is not None
