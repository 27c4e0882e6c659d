"""
Ports Layer (Hexagonal Architecture)
====================================

Abstract interfaces between the audit core and its collaborators.

- ClaimExtractor: Text → Claims
- Validator: Claims → Findings
- ModelConnector: Prompt → generated text
- RunRepository: Terminal run storage
"""

from chemverify.ports.claim_extractor import ClaimExtractor
from chemverify.ports.model_connector import (
    GenerationCancelledError,
    ModelConnector,
    ModelConnectorError,
)
from chemverify.ports.repository import RunRepository
from chemverify.ports.validator import Validator

__all__ = [
    "ClaimExtractor",
    "GenerationCancelledError",
    "ModelConnector",
    "ModelConnectorError",
    "RunRepository",
    "Validator",
]
