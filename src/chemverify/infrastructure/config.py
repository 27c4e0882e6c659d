"""
Configuration Management
========================

Pydantic-settings based configuration for the model connector, the
audit pipeline and extra policy profiles. Reads from environment
variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chemverify.domain.run import OutputContract, PolicySettings


class ModelSettings(BaseSettings):
    """Configuration for the text generation backend."""

    model_config = SettingsConfigDict(env_prefix="MODEL_", extra="ignore")

    connector: Literal["mock", "openai"] = Field(
        default="mock",
        description="Which model connector to use",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for OpenAI-compatible API",
    )
    api_key: SecretStr = Field(
        default=SecretStr("no-key-required"),
        description="API key (some OpenAI-compatible servers require a value)",
    )
    model: str = Field(default="gpt-4o-mini", description="Model name/ID to use")
    timeout_seconds: float = Field(default=60.0, ge=1.0)
    max_retries: int = Field(default=2, ge=0)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=1024, ge=1)


class AuditSettings(BaseSettings):
    """Configuration for the audit pipeline."""

    model_config = SettingsConfigDict(env_prefix="AUDIT_", extra="ignore")

    default_policy_profile: str | None = Field(
        default=None,
        description="Profile applied when a request names none",
    )
    snippet_radius: int = Field(default=30, ge=0, description="Evidence snippet padding")
    multi_scenario_window: int = Field(
        default=80,
        ge=0,
        description="Characters around conflicting values searched for scenario cues",
    )
    contradiction_tolerance_percent: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Relative difference below which values count as equal",
    )
    audit_log_path: str | None = Field(
        default=None,
        description="Optional file receiving one line per finished run",
    )


class PolicyProfileDefinition(BaseModel):
    """An externally configured policy profile."""

    required_contract: OutputContract = OutputContract.FREE_TEXT
    allow_contract_retry: bool = False
    max_contract_retries: int = Field(default=0, ge=0)
    included_validators: list[str] = Field(default_factory=list)
    excluded_validators: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _include_exclude_exclusive(self) -> PolicyProfileDefinition:
        if self.included_validators and self.excluded_validators:
            raise ValueError("included_validators and excluded_validators are mutually exclusive")
        return self

    def to_settings(self) -> PolicySettings:
        return PolicySettings(
            required_contract=self.required_contract,
            allow_contract_retry=self.allow_contract_retry,
            max_contract_retries=self.max_contract_retries,
            included_validators=frozenset(self.included_validators),
            excluded_validators=frozenset(self.excluded_validators),
        )


class PolicyConfig(BaseSettings):
    """Extra policy profiles, e.g. ``POLICY_PROFILES='{"Mine": {...}}'``."""

    model_config = SettingsConfigDict(env_prefix="POLICY_", extra="ignore")

    profiles: dict[str, PolicyProfileDefinition] = Field(default_factory=dict)

    def to_settings(self) -> dict[str, PolicySettings]:
        return {name: profile.to_settings() for name, profile in self.profiles.items()}


class Settings(BaseSettings):
    """
    Root configuration aggregating all settings groups.

    Usage:
        settings = get_settings()
        connector = settings.model.connector
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    model: ModelSettings = Field(default_factory=ModelSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)

    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance, reading from environment on first call.
    """
    return Settings()
