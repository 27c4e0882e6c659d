"""
Tests for AuditOrchestrator
===========================
"""

import asyncio
from uuid import UUID

import pytest
from conftest import HangingConnector, ScriptedConnector

from chemverify.adapters.outbound.model_mock import DEFAULT_OUTPUT, MockModelConnector
from chemverify.application.audit_orchestrator import (
    PIPELINE_VALIDATOR_NAME,
    REFORMAT_PROMPT,
    VERIFY_ONLY_MODEL_NAME,
)
from chemverify.domain.entities import Claim, Finding, FindingKind, ValidationStatus
from chemverify.domain.run import AuditCommand, AuditRun, OutputContract, RunMode, RunStatus
from chemverify.domain.services.canonicalizer import compute_run_hash
from chemverify.domain.services.validators.registry import ValidatorRegistry, default_validators
from chemverify.ports.model_connector import ModelConnectorError
from chemverify.ports.validator import Validator

PROSE_WITHOUT_CLAIMS = "The product looked pale and the chemist was pleased."


class ExplodingValidator(Validator):
    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        raise RuntimeError("lookup table corrupted")


def by_validator(findings, name: str):
    return [f for f in findings if f.validator_name == name]


class TestGenerateAndAudit:
    """Full pipeline through the model connector."""

    @pytest.mark.asyncio
    async def test_mock_paragraph(self, orchestrator_factory, repository) -> None:
        orchestrator = orchestrator_factory(MockModelConnector())

        artifact = await orchestrator.execute(AuditCommand(prompt="Describe the synthesis."))

        run = artifact.run
        assert run.status == RunStatus.COMPLETED
        assert run.mode == RunMode.GENERATE_AND_AUDIT
        assert run.output == DEFAULT_OUTPUT
        assert run.connector_name == "MockModelConnector"
        assert len(run.current_hash) == 64
        assert len(artifact.artifact_hash) == 64
        assert 0.0 <= run.risk_score <= 1.0
        assert artifact.claims
        assert any(f.kind == FindingKind.MULTI_SCENARIO for f in artifact.findings)
        assert await repository.get_artifact(run.id) is not None

    @pytest.mark.asyncio
    async def test_run_hash_matches_inputs(self, orchestrator_factory) -> None:
        orchestrator = orchestrator_factory(MockModelConnector())

        artifact = await orchestrator.execute(
            AuditCommand(prompt="Describe the synthesis.", previous_hash="prev", model_name="m1")
        )

        run = artifact.run
        assert run.current_hash == compute_run_hash(
            "prev", "Describe the synthesis.", DEFAULT_OUTPUT, run.created_at, "m1"
        )

    @pytest.mark.asyncio
    async def test_hash_chain(self, orchestrator_factory) -> None:
        orchestrator = orchestrator_factory(MockModelConnector())

        first = await orchestrator.execute(AuditCommand(prompt="p"))
        second = await orchestrator.execute(
            AuditCommand(prompt="p", previous_hash=first.run.current_hash)
        )

        assert second.run.previous_hash == first.run.current_hash
        assert second.run.current_hash != first.run.current_hash

    @pytest.mark.asyncio
    async def test_findings_enriched_with_evidence(self, orchestrator_factory) -> None:
        orchestrator = orchestrator_factory(MockModelConnector())

        artifact = await orchestrator.execute(AuditCommand(prompt="p"))

        doi_findings = by_validator(artifact.findings, "DoiFormatValidator")
        assert doi_findings
        assert all(f.has_evidence and f.evidence_snippet for f in doi_findings)


class TestContractRetry:
    """Bounded reformat-and-retry when a structured contract yields nothing."""

    @pytest.mark.asyncio
    async def test_single_reformat_attempt(self, orchestrator_factory) -> None:
        connector = ScriptedConnector(PROSE_WITHOUT_CLAIMS, '[{"rawText": "85%", "type": "yield"}]')
        orchestrator = orchestrator_factory(connector)

        artifact = await orchestrator.execute(
            AuditCommand(prompt="p", policy_profile="StrictChemistryV0")
        )

        assert len(connector.prompts) == 2
        assert connector.prompts[1] == REFORMAT_PROMPT + PROSE_WITHOUT_CLAIMS
        assert artifact.run.output == '[{"rawText": "85%", "type": "yield"}]'
        assert [c.raw_text for c in artifact.claims] == ["85%"]
        assert artifact.run.status == RunStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_retry_budget_respected(self, orchestrator_factory) -> None:
        connector = ScriptedConnector(PROSE_WITHOUT_CLAIMS, PROSE_WITHOUT_CLAIMS, "85%")
        orchestrator = orchestrator_factory(connector)

        artifact = await orchestrator.execute(
            AuditCommand(prompt="p", policy_profile="StrictChemistryV0")
        )

        assert len(connector.prompts) == 2
        assert artifact.claims == []
        assert artifact.run.status == RunStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_no_retry_when_claims_found(self, orchestrator_factory) -> None:
        connector = ScriptedConnector("Yield 82%.")
        orchestrator = orchestrator_factory(connector)

        await orchestrator.execute(AuditCommand(prompt="p", policy_profile="StrictChemistryV0"))

        assert len(connector.prompts) == 1

    @pytest.mark.asyncio
    async def test_no_retry_for_free_text(self, orchestrator_factory) -> None:
        connector = ScriptedConnector(PROSE_WITHOUT_CLAIMS)
        orchestrator = orchestrator_factory(connector)

        await orchestrator.execute(
            AuditCommand(prompt="p", output_contract=OutputContract.JSON_CLAIMS_BLOCK_V1)
        )

        assert len(connector.prompts) == 1


class TestFailureContainment:
    """Every run reaches a terminal status."""

    @pytest.mark.asyncio
    async def test_connector_failure_fails_run(self, orchestrator_factory, repository) -> None:
        orchestrator = orchestrator_factory(ScriptedConnector(ModelConnectorError("backend down")))

        artifact = await orchestrator.execute(AuditCommand(prompt="Describe the synthesis."))

        run = artifact.run
        assert run.status == RunStatus.FAILED
        assert run.risk_score == 1.0
        assert run.current_hash
        pipeline = by_validator(artifact.findings, PIPELINE_VALIDATOR_NAME)
        assert len(pipeline) == 1
        assert pipeline[0].status == ValidationStatus.FAIL
        assert pipeline[0].kind == FindingKind.PIPELINE_FAILURE
        assert "backend down" in pipeline[0].message
        assert len([f for f in artifact.findings if f.status == ValidationStatus.FAIL]) == 1
        assert await repository.get_artifact(run.id) is not None

    @pytest.mark.asyncio
    async def test_failure_during_retry_keeps_primary_hash(self, orchestrator_factory) -> None:
        connector = ScriptedConnector(PROSE_WITHOUT_CLAIMS, ModelConnectorError("timeout"))
        orchestrator = orchestrator_factory(connector)

        artifact = await orchestrator.execute(
            AuditCommand(prompt="p", policy_profile="StrictChemistryV0")
        )

        run = artifact.run
        assert run.status == RunStatus.FAILED
        assert run.current_hash == compute_run_hash(
            None, "p", PROSE_WITHOUT_CLAIMS, run.created_at, run.model_name
        )

    @pytest.mark.asyncio
    async def test_validator_crash_contained(self, orchestrator_factory) -> None:
        validators = ValidatorRegistry([*default_validators(), ExplodingValidator()])
        orchestrator = orchestrator_factory(MockModelConnector(), validators=validators)

        artifact = await orchestrator.execute(AuditCommand(prompt="p"))

        assert artifact.run.status == RunStatus.COMPLETED
        crashed = by_validator(artifact.findings, "ExplodingValidator")
        assert len(crashed) == 1
        assert crashed[0].status == ValidationStatus.UNVERIFIED
        assert crashed[0].kind == FindingKind.VALIDATOR_FAILURE
        assert crashed[0].confidence == 0.0
        assert "lookup table corrupted" in crashed[0].message

    @pytest.mark.asyncio
    async def test_cancellation_during_generation(self, orchestrator_factory) -> None:
        connector = HangingConnector()
        orchestrator = orchestrator_factory(connector)
        cancel_event = asyncio.Event()

        task = asyncio.create_task(orchestrator.execute(AuditCommand(prompt="p"), cancel_event))
        await connector.started.wait()
        cancel_event.set()
        artifact = await asyncio.wait_for(task, timeout=5)

        assert artifact.run.status == RunStatus.FAILED
        assert artifact.run.risk_score == 1.0
        assert len(by_validator(artifact.findings, PIPELINE_VALIDATOR_NAME)) == 1

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, orchestrator_factory) -> None:
        connector = ScriptedConnector("Yield 82%.")
        orchestrator = orchestrator_factory(connector)
        cancel_event = asyncio.Event()
        cancel_event.set()

        artifact = await orchestrator.execute(AuditCommand(prompt="p"), cancel_event)

        assert artifact.run.status == RunStatus.FAILED
        assert connector.prompts == []


class TestVerifyText:
    """Audit of caller-supplied text."""

    @pytest.mark.asyncio
    async def test_verify_only(self, orchestrator_factory) -> None:
        connector = ScriptedConnector()
        orchestrator = orchestrator_factory(connector)
        text = "The product was isolated in 82% yield."

        artifact = await orchestrator.verify_text(text)

        run = artifact.run
        assert connector.prompts == []
        assert run.mode == RunMode.VERIFY_ONLY
        assert run.model_name == VERIFY_ONLY_MODEL_NAME
        assert run.output is None
        assert run.analyzed_text == text
        assert run.status == RunStatus.COMPLETED
        assert run.current_hash == compute_run_hash(
            None, "", text, run.created_at, VERIFY_ONLY_MODEL_NAME
        )
        assert run.risk_score == pytest.approx(0.05)

    @pytest.mark.asyncio
    async def test_verify_only_never_retries(self, orchestrator_factory) -> None:
        connector = ScriptedConnector()
        orchestrator = orchestrator_factory(connector)

        artifact = await orchestrator.verify_text(
            PROSE_WITHOUT_CLAIMS, policy_profile="StrictChemistryV0"
        )

        assert connector.prompts == []
        assert artifact.run.status == RunStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_policy_excludes_validators(self, orchestrator_factory) -> None:
        orchestrator = orchestrator_factory(ScriptedConnector())
        text = "The mixture was stirred and heated for 2 h."

        default = await orchestrator.verify_text(text)
        scientific = await orchestrator.verify_text(text, policy_profile="ScientificTextV0")

        assert by_validator(default.findings, "MissingSolventValidator")
        assert by_validator(scientific.findings, "MissingSolventValidator") == []
        assert scientific.run.policy_profile == "ScientificTextV0"

    @pytest.mark.asyncio
    async def test_default_policy_profile(self, orchestrator_factory) -> None:
        orchestrator = orchestrator_factory(
            ScriptedConnector(), default_policy_profile="ScientificTextV0"
        )

        artifact = await orchestrator.verify_text("The mixture was stirred and heated for 2 h.")

        assert artifact.run.policy_profile == "ScientificTextV0"
        assert by_validator(artifact.findings, "MissingSolventValidator") == []

    @pytest.mark.asyncio
    async def test_empty_text(self, orchestrator_factory) -> None:
        orchestrator = orchestrator_factory(ScriptedConnector())

        artifact = await orchestrator.verify_text("")

        assert artifact.run.status == RunStatus.COMPLETED
        assert artifact.claims == []
        assert artifact.findings == []
        assert artifact.run.risk_score == 0.0
