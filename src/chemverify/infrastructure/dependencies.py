"""
Dependency Composition
======================

Builds the audit orchestrator and its collaborators from settings.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chemverify.adapters.outbound.model_mock import MockModelConnector
from chemverify.adapters.outbound.model_openai import OpenAIModelConnector
from chemverify.adapters.outbound.repository_memory import InMemoryRunRepository
from chemverify.application.audit_orchestrator import AuditOrchestrator
from chemverify.domain.services.extractors.composite import (
    CompositeClaimExtractor,
    default_extractors,
)
from chemverify.domain.services.policy import PolicyProfileResolver
from chemverify.domain.services.scorer import RiskScorer
from chemverify.domain.services.validators.registry import default_registry
from chemverify.infrastructure.config import get_settings
from chemverify.infrastructure.logging import configure_logging

if TYPE_CHECKING:
    from chemverify.infrastructure.config import ModelSettings, Settings
    from chemverify.ports.model_connector import ModelConnector
    from chemverify.ports.repository import RunRepository

logger = logging.getLogger(__name__)

# (log_level, audit_log_path) of the active logging setup
_logging_configured: tuple[str, str | None] | None = None


def setup_logging(settings: Settings) -> None:
    """Configure logging from settings unless the same setup is already active."""
    global _logging_configured

    wanted = (settings.log_level, settings.audit.audit_log_path)
    if _logging_configured == wanted:
        return
    configure_logging(settings.log_level, audit_log_path=settings.audit.audit_log_path)
    _logging_configured = wanted


def build_connector(settings: ModelSettings) -> ModelConnector:
    if settings.connector == "openai":
        logger.info(f"Using OpenAI-compatible connector ({settings.model} @ {settings.base_url})")
        return OpenAIModelConnector(settings)
    logger.info("Using mock model connector")
    return MockModelConnector()


def build_orchestrator(
    settings: Settings | None = None,
    *,
    connector: ModelConnector | None = None,
    repository: RunRepository | None = None,
) -> AuditOrchestrator:
    """
    Wire an orchestrator from settings.

    Logging is configured from the same settings on first use.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
        connector: Overrides the connector chosen by settings.
        repository: Overrides the in-memory repository.
    """
    settings = settings or get_settings()
    setup_logging(settings)
    audit = settings.audit

    return AuditOrchestrator(
        connector=connector or build_connector(settings.model),
        repository=repository or InMemoryRunRepository(),
        extractor=CompositeClaimExtractor(default_extractors()),
        validators=default_registry(
            scenario_window=audit.multi_scenario_window,
            tolerance_percent=audit.contradiction_tolerance_percent,
        ),
        policies=PolicyProfileResolver(settings.policy.to_settings()),
        scorer=RiskScorer(),
        snippet_radius=audit.snippet_radius,
        default_policy_profile=audit.default_policy_profile,
    )
