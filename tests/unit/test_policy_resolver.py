"""
Tests for PolicyProfileResolver
===============================
"""

import pytest

from chemverify.domain.run import OutputContract, PolicySettings
from chemverify.domain.services.policy import (
    CHEMISTRY_PROCEDURE_VALIDATORS,
    DEFAULT_POLICY,
    PolicyProfileResolver,
)


@pytest.fixture
def resolver() -> PolicyProfileResolver:
    return PolicyProfileResolver()


class TestPolicyProfileResolver:
    """Profile lookup and fallback."""

    def test_strict_profile(self, resolver: PolicyProfileResolver) -> None:
        policy = resolver.resolve("StrictChemistryV0")

        assert policy.required_contract == OutputContract.JSON_CLAIMS_BLOCK_V1
        assert policy.allow_contract_retry is True
        assert policy.max_contract_retries == 1

    def test_scientific_text_excludes_procedure_rules(
        self, resolver: PolicyProfileResolver
    ) -> None:
        policy = resolver.resolve("ScientificTextV0")

        assert policy.excluded_validators == CHEMISTRY_PROCEDURE_VALIDATORS
        assert not policy.allows_validator("MissingSolventValidator")
        assert policy.allows_validator("DoiFormatValidator")

    @pytest.mark.parametrize("name", [None, "", "   ", "NoSuchProfile"])
    def test_unknown_falls_back_to_default(
        self, resolver: PolicyProfileResolver, name: str | None
    ) -> None:
        policy = resolver.resolve(name)

        assert policy == DEFAULT_POLICY
        assert policy.required_contract == OutputContract.FREE_TEXT
        assert policy.allow_contract_retry is False

    def test_case_insensitive(self, resolver: PolicyProfileResolver) -> None:
        assert resolver.resolve("strictchemistryv0") == resolver.resolve("StrictChemistryV0")

    def test_extra_profiles_override_builtin(self) -> None:
        custom = PolicySettings(included_validators=frozenset({"DoiFormatValidator"}))
        resolver = PolicyProfileResolver({"LenientV0": custom, "DoiOnly": custom})

        assert resolver.resolve("LenientV0") is custom
        assert resolver.resolve("DoiOnly") is custom
        assert "DoiOnly" in resolver.profile_names

    def test_without_builtin(self) -> None:
        resolver = PolicyProfileResolver(include_builtin=False)

        assert resolver.profile_names == []
        assert resolver.resolve("StrictChemistryV0") == resolver.default


class TestPolicySettings:
    """Validator include/exclude semantics."""

    def test_include_list_wins(self) -> None:
        policy = PolicySettings(
            included_validators=frozenset({"A"}),
            excluded_validators=frozenset({"A", "B"}),
        )

        assert policy.allows_validator("A")
        assert not policy.allows_validator("B")
        assert not policy.allows_validator("C")

    def test_exclude_list(self) -> None:
        policy = PolicySettings(excluded_validators=frozenset({"B"}))

        assert policy.allows_validator("A")
        assert not policy.allows_validator("B")

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValueError):
            PolicySettings(max_contract_retries=-1)
