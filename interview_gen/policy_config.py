"""Fallback policy configuration management.

This module loads the per-use-case provider chains from YAML. Each use
case lists its providers in fallback order together with the retry
budget, backoff and timeout for that provider, plus the sampling
settings and whether a degraded stub may be served.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .models import UseCase
from .providers.base import MAX_TIMEOUT_SECONDS, MIN_TIMEOUT_SECONDS
from .stubs import DEGRADED_RESPONDERS

logger = logging.getLogger(__name__)

TEXT_PROVIDERS = {"openai", "google", "cohere", "regex-resume"}
TRANSCRIPTION_PROVIDERS = {"whisper", "assemblyai"}
OFFLINE_RESUME_PROVIDER = "regex-resume"


class ProviderAssignment(BaseModel):
    """One provider in a use case's fallback chain.

    Attributes:
        provider: Provider name
        model: Optional specific model (overrides the provider default)
        max_retries: Retries after the first attempt
        base_delay: Backoff base delay in seconds
        max_delay: Cap on the exponential backoff component
        jitter: Upper bound of the random backoff component
        timeout: Per-call timeout; the settings default applies when unset
    """

    provider: str
    model: Optional[str] = Field(
        None, description="Specific model to use for this provider"
    )
    max_retries: int = Field(2, ge=0, le=5)
    base_delay: float = Field(1.0, ge=0.0)
    max_delay: float = Field(8.0, ge=0.0)
    jitter: float = Field(0.5, ge=0.0)
    timeout: Optional[float] = Field(
        None, ge=MIN_TIMEOUT_SECONDS, le=MAX_TIMEOUT_SECONDS
    )

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Validate provider is one of the supported options."""
        valid_providers = TEXT_PROVIDERS | TRANSCRIPTION_PROVIDERS
        if v not in valid_providers:
            raise ValueError(
                f"Provider must be one of {sorted(valid_providers)}, got '{v}'"
            )
        return v


class UseCasePolicyConfig(BaseModel):
    """Fallback policy for one use case.

    Attributes:
        providers: Providers in the order they are tried
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate
        degraded: Serve stub content when every provider fails
    """

    providers: List[ProviderAssignment] = Field(..., min_length=1)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(1000, gt=0)
    degraded: bool = False


class PolicyConfig(BaseModel):
    """Complete fallback policy configuration.

    Attributes:
        version: Configuration version
        use_cases: Policy per use case
    """

    version: str
    use_cases: Dict[UseCase, UseCasePolicyConfig]

    @model_validator(mode="after")
    def validate_chains(self) -> "PolicyConfig":
        """Check each chain only uses providers able to serve its use case."""
        for use_case, policy in self.use_cases.items():
            names = [assignment.provider for assignment in policy.providers]

            if use_case == UseCase.TRANSCRIPTION:
                wrong = [n for n in names if n not in TRANSCRIPTION_PROVIDERS]
            else:
                wrong = [n for n in names if n not in TEXT_PROVIDERS]
            if wrong:
                raise ValueError(
                    f"Use case '{use_case.value}' cannot use provider(s) {wrong}"
                )

            if OFFLINE_RESUME_PROVIDER in names and use_case != UseCase.RESUME_PARSE:
                raise ValueError(
                    f"'{OFFLINE_RESUME_PROVIDER}' is only valid for "
                    f"'{UseCase.RESUME_PARSE.value}', not '{use_case.value}'"
                )

            if policy.degraded and use_case not in DEGRADED_RESPONDERS:
                raise ValueError(
                    f"Use case '{use_case.value}' has no stub content and cannot "
                    f"be marked degraded"
                )
        return self


class PolicyConfigLoader:
    """Loader for fallback policy configuration files.

    This class handles loading, parsing, and validating policy configuration
    from YAML files.
    """

    def __init__(self, config_path: str | Path):
        """Initialize the configuration loader.

        Args:
            config_path: Path to the policy configuration YAML file
        """
        self.config_path = Path(config_path)
        self._config: Optional[PolicyConfig] = None

    def load(self) -> PolicyConfig:
        """Load and parse the configuration file.

        Returns:
            Parsed and validated policy configuration

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If configuration is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Policy configuration file not found: {self.config_path}"
            )

        logger.info(f"Loading policy configuration from {self.config_path}")

        try:
            with open(self.config_path, "r") as f:
                raw_config = yaml.safe_load(f)

            if not isinstance(raw_config, dict):
                raise ValueError("Policy configuration must be a YAML mapping")

            self._config = PolicyConfig(**raw_config)
            logger.info(
                f"Successfully loaded policy configuration "
                f"(version {self._config.version}, "
                f"{len(self._config.use_cases)} use cases)"
            )
            return self._config

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML configuration: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load policy configuration: {e}")
            raise

    @property
    def config(self) -> PolicyConfig:
        """Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded yet
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config


def load_policy_config(config_path: str | Path) -> PolicyConfig:
    """Load and validate a policy configuration file."""
    return PolicyConfigLoader(config_path).load()
