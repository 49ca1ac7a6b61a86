"""Build the orchestrator and service from settings and policy config.

Everything here runs once at process start. Providers whose API key is
missing are left out of every chain with a warning, so a deployment with
only some keys configured still serves what it can.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from .config import Settings
from .infrastructure.retry import RetryConfig, RetryExecutor
from .models import UseCase
from .orchestrator import FallbackOrchestrator, UseCasePolicy
from .policy_config import PolicyConfig, ProviderAssignment, load_policy_config
from .providers.assemblyai_provider import AssemblyAIProvider
from .providers.base import Provider, ProviderSpec
from .providers.cohere_provider import CohereProvider
from .providers.google_provider import GoogleProvider
from .providers.openai_provider import OpenAIProvider
from .providers.regex_resume import RegexResumeProvider
from .providers.whisper_provider import WhisperProvider
from .service import GenerationService
from .stubs import DEGRADED_RESPONDERS

logger = logging.getLogger(__name__)

# Provider name -> (settings attribute holding its key, constructor)
_PROVIDER_FACTORIES: Dict[str, Tuple[Optional[str], Callable[..., Provider]]] = {
    "openai": ("openai_api_key", OpenAIProvider),
    "google": ("google_api_key", GoogleProvider),
    "cohere": ("cohere_api_key", CohereProvider),
    "regex-resume": (None, RegexResumeProvider),
    "whisper": ("openai_api_key", WhisperProvider),
    "assemblyai": ("assemblyai_api_key", AssemblyAIProvider),
}


class _ProviderCache:
    """Builds each (provider, model, timeout) combination once."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._built: Dict[Tuple[str, Optional[str], float], Provider] = {}

    def get(self, assignment: ProviderAssignment) -> Optional[Provider]:
        timeout = assignment.timeout or self.settings.default_timeout_seconds
        key = (assignment.provider, assignment.model, timeout)
        if key in self._built:
            return self._built[key]

        key_attr, constructor = _PROVIDER_FACTORIES[assignment.provider]
        kwargs: Dict[str, Any] = {"timeout": timeout}
        if assignment.model:
            kwargs["model"] = assignment.model
        if key_attr is not None:
            api_key = getattr(self.settings, key_attr)
            if not api_key:
                return None
            kwargs["api_key"] = api_key
        if assignment.provider == "openai" and self.settings.openai_organization:
            kwargs["organization"] = self.settings.openai_organization

        provider = constructor(**kwargs)
        logger.info(
            f"Initialized {assignment.provider} provider with model {provider.model}"
        )
        self._built[key] = provider
        return provider


def _retry_config(assignment: ProviderAssignment, settings: Settings) -> RetryConfig:
    return RetryConfig(
        max_retries=assignment.max_retries,
        base_delay=assignment.base_delay,
        max_delay=assignment.max_delay,
        jitter=assignment.jitter,
        classify_fatal=settings.classify_fatal_errors,
    )


def build_policies(
    settings: Settings, policy_config: PolicyConfig
) -> Dict[UseCase, UseCasePolicy]:
    """Turn validated policy configuration into orchestrator policies.

    Args:
        settings: Settings with API keys and defaults
        policy_config: Validated policy configuration

    Returns:
        Policy per configured use case
    """
    cache = _ProviderCache(settings)
    policies: Dict[UseCase, UseCasePolicy] = {}

    for use_case, config in policy_config.use_cases.items():
        specs = []
        for rank, assignment in enumerate(config.providers):
            provider = cache.get(assignment)
            if provider is None:
                logger.warning(
                    f"No API key for {assignment.provider}; skipping it in the "
                    f"{use_case.value} chain"
                )
                continue
            specs.append(
                ProviderSpec(
                    name=assignment.provider,
                    rank=rank,
                    provider=provider,
                    retry=_retry_config(assignment, settings),
                )
            )

        if not specs:
            logger.warning(f"Use case {use_case.value} has no usable providers")

        policies[use_case] = UseCasePolicy(
            use_case=use_case,
            providers=specs,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            degraded_responder=DEGRADED_RESPONDERS.get(use_case)
            if config.degraded
            else None,
        )

    return policies


def build_orchestrator(
    settings: Settings,
    policy_config: Optional[PolicyConfig] = None,
    executor: Optional[RetryExecutor] = None,
) -> FallbackOrchestrator:
    """Build the fallback orchestrator.

    Args:
        settings: Application settings
        policy_config: Policy configuration; loaded from
            ``settings.policy_config_path`` when omitted
        executor: Retry executor override

    Returns:
        Configured FallbackOrchestrator
    """
    if policy_config is None:
        policy_config = load_policy_config(settings.policy_config_path)
    return FallbackOrchestrator(build_policies(settings, policy_config), executor)


def build_service(
    settings: Settings, policy_config: Optional[PolicyConfig] = None
) -> GenerationService:
    """Build the generation service once at process start."""
    return GenerationService(build_orchestrator(settings, policy_config))
