"""
Audit Runs
==========

One audit execution, the caller command that starts it, and the
policy settings that shape it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum, auto
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class RunStatus(StrEnum):
    """Lifecycle stage of an audit run."""

    CREATED = auto()
    GENERATING = auto()
    HASHING = auto()
    EXTRACTING = auto()
    VALIDATING = auto()
    SCORING = auto()
    COMPLETED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.FAILED)


class RunMode(StrEnum):
    """Where the analyzed text comes from."""

    GENERATE_AND_AUDIT = auto()  # Model connector produces the text
    VERIFY_ONLY = auto()  # Caller supplies the text


class OutputContract(StrEnum):
    """Structural shape the model output must conform to."""

    FREE_TEXT = auto()
    JSON_CLAIMS_BLOCK_V1 = auto()


class PolicySettings(BaseModel):
    """Resolved pipeline behavior for one run."""

    required_contract: OutputContract = OutputContract.FREE_TEXT
    allow_contract_retry: bool = False
    max_contract_retries: int = Field(default=0, ge=0)
    included_validators: frozenset[str] = Field(default_factory=frozenset)
    excluded_validators: frozenset[str] = Field(default_factory=frozenset)

    model_config = {"frozen": True}

    def allows_validator(self, name: str) -> bool:
        """Include list wins when non-empty; otherwise the exclude list applies."""
        if self.included_validators:
            return name in self.included_validators
        return name not in self.excluded_validators


class AuditCommand(BaseModel):
    """Caller request to generate text with a model and audit it."""

    prompt: str
    user_id: str | None = None
    model_name: str = "mock"
    connector_name: str | None = None
    model_version: str | None = None
    parameters: dict[str, Any] | None = None
    policy_profile: str | None = None
    output_contract: OutputContract = OutputContract.FREE_TEXT
    previous_hash: str | None = None

    model_config = {"frozen": True}


class AuditRun(BaseModel):
    """
    A single audit execution.

    Mutated only by the orchestrator while its pipeline runs. The
    analyzed text is the model output in generate mode and the
    supplied input text in verify-only mode.
    """

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: RunStatus = RunStatus.CREATED
    mode: RunMode = RunMode.GENERATE_AND_AUDIT

    user_id: str | None = None
    model_name: str = "mock"
    connector_name: str | None = None
    policy_profile: str | None = None
    model_version: str | None = None
    parameters: dict[str, Any] | None = None

    prompt: str = ""
    input_text: str | None = None
    output: str | None = None

    previous_hash: str | None = None
    current_hash: str = ""
    risk_score: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = {"validate_assignment": True}

    @property
    def analyzed_text(self) -> str:
        if self.output:
            return self.output
        return self.input_text or ""
