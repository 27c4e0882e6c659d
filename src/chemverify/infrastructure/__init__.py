"""
Infrastructure Layer
====================

Settings, logging and composition of the audit pipeline.
"""

from chemverify.infrastructure.config import (
    AuditSettings,
    ModelSettings,
    PolicyConfig,
    PolicyProfileDefinition,
    Settings,
    get_settings,
)
from chemverify.infrastructure.dependencies import (
    build_connector,
    build_orchestrator,
    setup_logging,
)
from chemverify.infrastructure.logging import configure_logging

__all__ = [
    "AuditSettings",
    "ModelSettings",
    "PolicyConfig",
    "PolicyProfileDefinition",
    "Settings",
    "build_connector",
    "build_orchestrator",
    "configure_logging",
    "get_settings",
    "setup_logging",
]
