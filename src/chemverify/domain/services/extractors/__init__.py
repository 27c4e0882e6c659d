"""
Claim extractors turning analyzed text into typed claims.
"""

from chemverify.domain.services.extractors.composite import (
    CompositeClaimExtractor,
    ExtractionOutcome,
    ExtractionResult,
    default_extractors,
    run_extractor,
)
from chemverify.domain.services.extractors.doi import DoiExtractor
from chemverify.domain.services.extractors.numeric_unit import NumericUnitExtractor
from chemverify.domain.services.extractors.reagent_role import ReagentRoleExtractor

__all__ = [
    "CompositeClaimExtractor",
    "DoiExtractor",
    "ExtractionOutcome",
    "ExtractionResult",
    "NumericUnitExtractor",
    "ReagentRoleExtractor",
    "default_extractors",
    "run_extractor",
]
