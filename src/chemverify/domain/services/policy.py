"""
Policy Profile Resolver
=======================

Maps a named policy profile to the settings one pipeline execution
runs under: the output contract to enforce, the retry budget, and which
validators may run.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from chemverify.domain.run import OutputContract, PolicySettings

logger = logging.getLogger(__name__)

CHEMISTRY_PROCEDURE_VALIDATORS = frozenset(
    {
        "IncompatibleReagentSolventValidator",
        "MissingSolventValidator",
        "MissingTemperatureWhenImpliedValidator",
        "QuenchWhenReactiveReagentValidator",
        "DryInertMismatchValidator",
        "EquivalentsConsistencyValidator",
    }
)

DEFAULT_POLICY = PolicySettings(
    required_contract=OutputContract.FREE_TEXT,
    allow_contract_retry=False,
    max_contract_retries=0,
)

BUILTIN_PROFILES: Mapping[str, PolicySettings] = MappingProxyType(
    {
        "StrictChemistryV0": PolicySettings(
            required_contract=OutputContract.JSON_CLAIMS_BLOCK_V1,
            allow_contract_retry=True,
            max_contract_retries=1,
        ),
        "ScientificTextV0": PolicySettings(
            required_contract=OutputContract.FREE_TEXT,
            allow_contract_retry=False,
            max_contract_retries=0,
            excluded_validators=CHEMISTRY_PROCEDURE_VALIDATORS,
        ),
        "LenientV0": PolicySettings(
            required_contract=OutputContract.FREE_TEXT,
            allow_contract_retry=False,
            max_contract_retries=0,
        ),
    }
)


class PolicyProfileResolver:
    """
    Lookup over an immutable profile table.

    Extra profiles override built-in ones of the same name. Unknown or
    missing names resolve to the permissive default rather than raising.
    """

    def __init__(
        self,
        profiles: Mapping[str, PolicySettings] | None = None,
        default: PolicySettings = DEFAULT_POLICY,
        include_builtin: bool = True,
    ) -> None:
        table: dict[str, PolicySettings] = dict(BUILTIN_PROFILES) if include_builtin else {}
        table.update(profiles or {})
        self._profiles = MappingProxyType(table)
        self._folded = MappingProxyType({name.casefold(): s for name, s in table.items()})
        self._default = default

    @property
    def profile_names(self) -> list[str]:
        return sorted(self._profiles)

    @property
    def default(self) -> PolicySettings:
        return self._default

    def resolve(self, profile_name: str | None) -> PolicySettings:
        if not profile_name or not profile_name.strip():
            return self._default

        name = profile_name.strip()
        settings = self._profiles.get(name) or self._folded.get(name.casefold())
        if settings is None:
            logger.info(f"Unknown policy profile '{name}', using default")
            return self._default
        return settings
