"""
Validators checking extracted claims for internal consistency.
"""

from chemverify.domain.services.validators.base import StepAnalysis, ValidatorBase
from chemverify.domain.services.validators.doi_format import DoiFormatValidator
from chemverify.domain.services.validators.numeric_contradiction import (
    NumericContradictionValidator,
)
from chemverify.domain.services.validators.procedure import (
    DryInertMismatchValidator,
    QuenchWhenReactiveReagentValidator,
)
from chemverify.domain.services.validators.reagent_solvent import (
    ConcentrationSanityValidator,
    IncompatibleReagentSolventValidator,
    MissingSolventValidator,
)
from chemverify.domain.services.validators.registry import (
    ValidationOutcome,
    ValidatorRegistry,
    default_registry,
    default_validators,
    run_validator,
)
from chemverify.domain.services.validators.stoichiometry import (
    EquivalentsConsistencyValidator,
    MwConsistencyValidator,
    YieldMassConsistencyValidator,
)
from chemverify.domain.services.validators.temperature import (
    MissingTemperatureWhenImpliedValidator,
)
from chemverify.domain.services.validators.text_integrity import (
    IncompleteScientificClaimValidator,
    MalformedChemicalTokenValidator,
    MixedCitationStyleValidator,
    PlaceholderTokenValidator,
)

__all__ = [
    "ConcentrationSanityValidator",
    "DoiFormatValidator",
    "DryInertMismatchValidator",
    "EquivalentsConsistencyValidator",
    "IncompatibleReagentSolventValidator",
    "IncompleteScientificClaimValidator",
    "MalformedChemicalTokenValidator",
    "MissingSolventValidator",
    "MissingTemperatureWhenImpliedValidator",
    "MixedCitationStyleValidator",
    "MwConsistencyValidator",
    "NumericContradictionValidator",
    "PlaceholderTokenValidator",
    "QuenchWhenReactiveReagentValidator",
    "StepAnalysis",
    "ValidationOutcome",
    "ValidatorBase",
    "ValidatorRegistry",
    "YieldMassConsistencyValidator",
    "default_registry",
    "default_validators",
    "run_validator",
]
