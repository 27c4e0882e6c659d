"""
Pytest Fixtures
===============

Shared fixtures for all test modules.
"""

from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

import pytest

from chemverify.adapters.outbound.repository_memory import InMemoryRunRepository
from chemverify.application.audit_orchestrator import AuditOrchestrator
from chemverify.domain.entities import (
    Claim,
    ClaimType,
    Finding,
    FindingKind,
    ValidationStatus,
)
from chemverify.domain.run import AuditRun, RunMode
from chemverify.domain.services.evidence_locator import format_locator
from chemverify.domain.services.extractors.composite import (
    CompositeClaimExtractor,
    default_extractors,
)
from chemverify.domain.services.policy import PolicyProfileResolver
from chemverify.domain.services.scorer import RiskScorer
from chemverify.domain.services.validators.registry import default_registry
from chemverify.ports.model_connector import ModelConnector, ModelConnectorError

PROCEDURE_TEXT = (
    "1. Benzaldehyde (10 mmol) was dissolved in anhydrous THF (20 mL) under argon. "
    "2. NaBH4 (12 mmol, 1.2 equiv) was added portionwise at 0 °C. "
    "3. The mixture was stirred for 2 h at room temperature. "
    "4. The reaction was quenched with saturated NH4Cl and extracted with EtOAc."
)


class ScriptedConnector(ModelConnector):
    """Returns queued outputs in order; an exception in the queue is raised."""

    def __init__(self, *outputs: str | Exception) -> None:
        self._outputs = list(outputs)
        self.prompts: list[str] = []

    async def generate(self, prompt: str, cancel_event: asyncio.Event | None = None) -> str:
        self.prompts.append(prompt)
        if not self._outputs:
            raise ModelConnectorError("No scripted output left")
        output = self._outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


class HangingConnector(ModelConnector):
    """Never returns until cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()

    async def generate(self, prompt: str, cancel_event: asyncio.Event | None = None) -> str:
        self.started.set()
        await asyncio.sleep(3600)
        return ""


# -----------------------------------------------------------------------------
# Domain Entity Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def run_id() -> UUID:
    return uuid4()


def make_numeric_claim(
    run_id: UUID,
    raw_text: str,
    value: str,
    unit: str,
    context_key: str | None,
    start: int = 0,
    **payload,
) -> Claim:
    """Helper to build a numeric claim at a given offset."""
    if context_key is not None:
        payload["context_key"] = context_key
    return Claim(
        run_id=run_id,
        claim_type=ClaimType.NUMERIC_WITH_UNIT,
        raw_text=raw_text,
        normalized_value=value,
        unit=unit,
        source_locator=format_locator(start, start + len(raw_text)),
        payload=payload,
    )


def make_finding(
    status: ValidationStatus,
    kind: FindingKind | None = None,
    validator_name: str = "TestValidator",
) -> Finding:
    """Helper to build a finding with a given status and kind."""
    return Finding(
        run_id=uuid4(),
        validator_name=validator_name,
        status=status,
        kind=kind,
        message="test",
    )


def make_run(text: str) -> AuditRun:
    """Verify-only run over the given text."""
    return AuditRun(mode=RunMode.VERIFY_ONLY, model_name="verify-only", input_text=text)


@pytest.fixture
def repository() -> InMemoryRunRepository:
    return InMemoryRunRepository()


@pytest.fixture
def orchestrator_factory(repository: InMemoryRunRepository):
    """Build an orchestrator around a given connector with default components."""

    def factory(connector: ModelConnector, **kwargs) -> AuditOrchestrator:
        return AuditOrchestrator(
            connector=connector,
            repository=kwargs.pop("repository", repository),
            extractor=kwargs.pop("extractor", CompositeClaimExtractor(default_extractors())),
            validators=kwargs.pop("validators", default_registry()),
            policies=kwargs.pop("policies", PolicyProfileResolver()),
            scorer=kwargs.pop("scorer", RiskScorer()),
            **kwargs,
        )

    return factory
