"""Configuration for running the snippets.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Command-line flags override these values for a single run.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from deferred_flow.runtime.compose.aggregator import ConcurrentFailurePolicy


class DeferredFlowSettings(BaseSettings):
    """Settings for the snippet runner.

    Environment variables:
    - LOG_LEVEL                               (optional)
    - DEFERRED_FLOW_SUCCESS_PROBABILITY       (optional)
    - DEFERRED_FLOW_SYNC_SUCCESS_PROBABILITY  (optional)
    - DEFERRED_FLOW_SEED                      (optional)
    - DEFERRED_FLOW_FAILURE_POLICY            (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `DeferredFlowSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    success_probability: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        validation_alias="DEFERRED_FLOW_SUCCESS_PROBABILITY",
        description="Chance that a deferred operation succeeds",
    )

    sync_success_probability: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        validation_alias="DEFERRED_FLOW_SYNC_SUCCESS_PROBABILITY",
        description="Chance that a synchronous operation succeeds",
    )

    seed: int | None = Field(
        default=None,
        validation_alias="DEFERRED_FLOW_SEED",
        description="Seed for the random source; unset means a fresh source per run",
    )

    failure_policy: ConcurrentFailurePolicy = Field(
        default=ConcurrentFailurePolicy.WAIT_ALL,
        validation_alias="DEFERRED_FLOW_FAILURE_POLICY",
        description=(
            "How concurrent composition reports failures: 'wait_all' waits for both "
            "operations and prefers the first operand's reason, 'fail_fast' returns "
            "the first failure observed"
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level
