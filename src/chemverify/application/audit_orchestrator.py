"""
AuditOrchestrator
=================

Primary application use-case: drives one audit run end to end.

Flow:
1. Create the run and resolve its policy
2. Obtain the analyzed text (model connector, or caller-supplied text)
3. Hash-chain the run
4. Extract claims, retrying once through a reformat request when a
   structured contract yields nothing
5. Run the validators the policy allows
6. Enrich evidence and score
7. Persist and assemble the artifact

Every run reaches a terminal status. Extractor and validator failures
become findings; anything else that escapes marks the run failed with
maximum risk.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from chemverify.domain.entities import Finding, FindingKind, ValidationStatus
from chemverify.domain.run import (
    AuditCommand,
    AuditRun,
    OutputContract,
    PolicySettings,
    RunMode,
    RunStatus,
)
from chemverify.domain.services.canonicalizer import (
    build_artifact,
    compute_fallback_hash,
    compute_run_hash,
)
from chemverify.domain.services.evidence_locator import DEFAULT_SNIPPET_RADIUS, enrich_findings
from chemverify.domain.services.validators.registry import run_validator
from chemverify.ports.model_connector import GenerationCancelledError

if TYPE_CHECKING:
    from chemverify.domain.entities import Claim
    from chemverify.domain.results import AuditArtifact
    from chemverify.domain.services.extractors.composite import CompositeClaimExtractor
    from chemverify.domain.services.policy import PolicyProfileResolver
    from chemverify.domain.services.scorer import RiskScorer
    from chemverify.domain.services.validators.registry import ValidatorRegistry
    from chemverify.ports.model_connector import ModelConnector
    from chemverify.ports.repository import RunRepository

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("chemverify.audit")

PIPELINE_VALIDATOR_NAME = "Pipeline"
VERIFY_ONLY_MODEL_NAME = "verify-only"

REFORMAT_PROMPT = (
    "Reformat ONLY the following text into a JSON array of claims. "
    'Each claim has: {"type","rawText","value","unit"}. No prose.\n\n'
)


class AuditOrchestrator:
    """
    Orchestrates an audit run through the ports.

    Coordinates:
    - ModelConnector: Prompt → analyzed text
    - CompositeClaimExtractor: Text → Claims (+ diagnostics)
    - ValidatorRegistry: Claims → Findings
    - RiskScorer: Findings → risk score
    - RunRepository: Terminal run storage
    """

    def __init__(
        self,
        connector: ModelConnector,
        repository: RunRepository,
        extractor: CompositeClaimExtractor,
        validators: ValidatorRegistry,
        policies: PolicyProfileResolver,
        scorer: RiskScorer,
        snippet_radius: int = DEFAULT_SNIPPET_RADIUS,
        default_policy_profile: str | None = None,
    ) -> None:
        self._connector = connector
        self._repository = repository
        self._extractor = extractor
        self._validators = validators
        self._policies = policies
        self._scorer = scorer
        self._snippet_radius = snippet_radius
        self._default_policy_profile = default_policy_profile

    async def execute(
        self,
        command: AuditCommand,
        cancel_event: asyncio.Event | None = None,
    ) -> AuditArtifact:
        """
        Generate text for a prompt and audit it.

        Args:
            command: Prompt plus run metadata.
            cancel_event: Run-scoped cancellation signal, honoured while
                waiting on the model connector.

        Returns:
            The artifact for the terminal run (completed or failed).
        """
        run = AuditRun(
            mode=RunMode.GENERATE_AND_AUDIT,
            user_id=command.user_id,
            model_name=command.model_name,
            connector_name=command.connector_name or self._connector.name,
            policy_profile=command.policy_profile or self._default_policy_profile,
            model_version=command.model_version,
            parameters=command.parameters,
            prompt=command.prompt,
            previous_hash=command.previous_hash,
        )
        return await self._audit(run, command.output_contract, cancel_event)

    async def verify_text(
        self,
        text: str,
        policy_profile: str | None = None,
        user_id: str | None = None,
        previous_hash: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AuditArtifact:
        """Audit caller-supplied text without generating anything."""
        run = AuditRun(
            mode=RunMode.VERIFY_ONLY,
            user_id=user_id,
            model_name=VERIFY_ONLY_MODEL_NAME,
            policy_profile=policy_profile or self._default_policy_profile,
            prompt="",
            input_text=text,
            previous_hash=previous_hash,
        )
        return await self._audit(run, OutputContract.FREE_TEXT, cancel_event)

    async def _audit(
        self,
        run: AuditRun,
        requested_contract: OutputContract,
        cancel_event: asyncio.Event | None,
    ) -> AuditArtifact:
        start_time = time.perf_counter()
        claims: list[Claim] = []
        findings: list[Finding] = []

        policy = self._policies.resolve(run.policy_profile)
        contract = self._effective_contract(policy, requested_contract)

        try:
            await self._run_pipeline(run, policy, contract, claims, findings, cancel_event)
        except Exception as e:
            self._mark_failed(run, findings, e)

        await self._repository.save_run(run, claims, findings)
        artifact = build_artifact(run, claims, findings)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        audit_logger.info(
            f"run={run.id} status={run.status} risk={run.risk_score:.3f} "
            f"claims={len(claims)} findings={len(findings)} "
            f"hash={run.current_hash[:12]} elapsed_ms={elapsed_ms:.1f}"
        )
        return artifact

    @staticmethod
    def _effective_contract(
        policy: PolicySettings, requested: OutputContract
    ) -> OutputContract:
        """A policy that mandates a structured contract overrides the caller."""
        if policy.required_contract != OutputContract.FREE_TEXT:
            return policy.required_contract
        return requested

    async def _run_pipeline(
        self,
        run: AuditRun,
        policy: PolicySettings,
        contract: OutputContract,
        claims: list[Claim],
        findings: list[Finding],
        cancel_event: asyncio.Event | None,
    ) -> None:
        if run.mode == RunMode.GENERATE_AND_AUDIT:
            run.status = RunStatus.GENERATING
            run.output = await self._generate(run.prompt, cancel_event)

        self._hash(run)
        self._extract(run, claims, findings)

        retries = 0
        while self._should_retry(policy, contract, claims, run, retries):
            retries += 1
            logger.info(f"Run {run.id}: no claims under {contract}, reformat attempt {retries}")
            run.status = RunStatus.GENERATING
            run.output = await self._generate(REFORMAT_PROMPT + run.analyzed_text, cancel_event)
            self._hash(run)
            self._extract(run, claims, findings)

        run.status = RunStatus.VALIDATING
        for validator in self._validators.select(policy):
            outcome = run_validator(validator, run.id, claims, run)
            findings.extend(outcome.all_findings())

        findings[:] = enrich_findings(findings, claims, run.analyzed_text, self._snippet_radius)

        run.status = RunStatus.SCORING
        run.risk_score = self._scorer.score(findings)
        run.status = RunStatus.COMPLETED

    @staticmethod
    def _should_retry(
        policy: PolicySettings,
        contract: OutputContract,
        claims: list[Claim],
        run: AuditRun,
        retries: int,
    ) -> bool:
        return (
            run.mode == RunMode.GENERATE_AND_AUDIT
            and contract != OutputContract.FREE_TEXT
            and policy.allow_contract_retry
            and retries < policy.max_contract_retries
            and not claims
            and bool(run.analyzed_text.strip())
        )

    def _hash(self, run: AuditRun) -> None:
        run.status = RunStatus.HASHING
        run.current_hash = compute_run_hash(
            run.previous_hash,
            run.prompt,
            run.analyzed_text,
            run.created_at,
            run.model_name,
        )

    def _extract(self, run: AuditRun, claims: list[Claim], findings: list[Finding]) -> None:
        run.status = RunStatus.EXTRACTING
        result = self._extractor.extract_all(run.id, run.analyzed_text)
        claims.extend(result.claims)
        findings.extend(result.diagnostics)

    async def _generate(self, prompt: str, cancel_event: asyncio.Event | None) -> str:
        """Call the connector, abandoning the call if the run is cancelled."""
        if cancel_event is None:
            return await self._connector.generate(prompt)
        if cancel_event.is_set():
            raise GenerationCancelledError("Generation cancelled before it started")

        generation = asyncio.ensure_future(self._connector.generate(prompt, cancel_event))
        cancelled = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {generation, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (generation, cancelled):
                if not task.done():
                    task.cancel()

        if generation in done:
            return generation.result()
        raise GenerationCancelledError("Generation cancelled")

    def _mark_failed(self, run: AuditRun, findings: list[Finding], error: Exception) -> None:
        logger.error(f"Run {run.id} failed during {run.status}: {error}", exc_info=True)
        run.status = RunStatus.FAILED
        run.risk_score = 1.0
        if not run.current_hash:
            run.current_hash = compute_fallback_hash(run.prompt, run.created_at)
        findings.append(
            Finding(
                run_id=run.id,
                validator_name=PIPELINE_VALIDATOR_NAME,
                status=ValidationStatus.FAIL,
                kind=FindingKind.PIPELINE_FAILURE,
                message=f"Pipeline failed: {error}",
                confidence=1.0,
            )
        )
