"""
Validator Registry
==================

Open name → instance mapping. Policies filter validators purely by
name before any of them runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from chemverify.domain.entities import Finding, FindingKind, ValidationStatus
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

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim
    from chemverify.domain.run import AuditRun, PolicySettings
    from chemverify.ports.validator import Validator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Findings from one validator, or the diagnostic explaining its failure."""

    validator_name: str
    findings: list[Finding] = field(default_factory=list)
    diagnostic: Finding | None = None

    @property
    def succeeded(self) -> bool:
        return self.diagnostic is None

    def all_findings(self) -> list[Finding]:
        return list(self.findings) if self.diagnostic is None else [self.diagnostic]


def run_validator(
    validator: Validator, run_id: UUID, claims: list[Claim], run: AuditRun
) -> ValidationOutcome:
    """Run one validator and wrap its findings or failure."""
    name = validator.name
    try:
        findings = validator.validate(run_id, list(claims), run)
    except Exception as e:
        logger.warning(f"Validator {name} failed: {e}")
        return ValidationOutcome(
            validator_name=name,
            diagnostic=Finding(
                run_id=run_id,
                validator_name=name,
                status=ValidationStatus.UNVERIFIED,
                kind=FindingKind.VALIDATOR_FAILURE,
                message=f"Validator failed: {e}",
                confidence=0.0,
            ),
        )
    return ValidationOutcome(validator_name=name, findings=list(findings))


class ValidatorRegistry:
    """Registered validators keyed by name, in registration order."""

    def __init__(self, validators: Iterable[Validator] = ()) -> None:
        self._validators: dict[str, Validator] = {}
        for validator in validators:
            self.register(validator)

    def register(self, validator: Validator) -> None:
        if validator.name in self._validators:
            raise ValueError(f"Validator already registered: {validator.name}")
        self._validators[validator.name] = validator

    @property
    def names(self) -> list[str]:
        return list(self._validators)

    def as_mapping(self) -> MappingProxyType[str, Validator]:
        return MappingProxyType(self._validators)

    def get(self, name: str) -> Validator | None:
        return self._validators.get(name)

    def select(self, policy: PolicySettings) -> list[Validator]:
        """Validators the policy allows, in registration order."""
        return [v for name, v in self._validators.items() if policy.allows_validator(name)]

    def __iter__(self) -> Iterator[Validator]:
        return iter(self._validators.values())

    def __len__(self) -> int:
        return len(self._validators)


def default_validators(
    scenario_window: int = 80, tolerance_percent: float = 0.0
) -> list[Validator]:
    return [
        DoiFormatValidator(),
        NumericContradictionValidator(
            scenario_window=scenario_window, tolerance_percent=tolerance_percent
        ),
        IncompatibleReagentSolventValidator(),
        MissingSolventValidator(),
        MissingTemperatureWhenImpliedValidator(),
        MalformedChemicalTokenValidator(),
        IncompleteScientificClaimValidator(),
        MixedCitationStyleValidator(),
        QuenchWhenReactiveReagentValidator(),
        DryInertMismatchValidator(),
        EquivalentsConsistencyValidator(),
        PlaceholderTokenValidator(),
        YieldMassConsistencyValidator(),
        MwConsistencyValidator(),
        ConcentrationSanityValidator(),
    ]


def default_registry(**kwargs) -> ValidatorRegistry:
    return ValidatorRegistry(default_validators(**kwargs))
