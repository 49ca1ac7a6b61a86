"""Ordered fallback across providers for each use case.

For a request, the orchestrator builds the prompt once and walks the use
case's provider chain in rank order. Each provider gets its own retry
budget; the first response that also survives extraction wins and later
providers are never called. A response that cannot be parsed counts as
that provider's failure and the walk continues. When the chain is spent
the use case's degraded responder, if any, supplies placeholder content;
otherwise ExhaustedError lists every provider's failure.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .errors import ExhaustedError, ParseError, ProviderFailure
from .extraction import extract, validate_model
from .infrastructure.retry import FatalFailure, RetryExecutor, Success
from .models import GenerationResult, TranscriptResult, UseCase
from .prompts import build_prompt
from .providers.base import InvokeParams, ProviderSpec
from .request import GenerationRequest
from .stubs import STUB_PROVIDER_NAME, DegradedResponder

logger = logging.getLogger(__name__)


def response_digest(raw: str) -> str:
    """Short SHA-1 of a raw response, for correlating debug logs."""
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:12]


@dataclass(frozen=True)
class UseCasePolicy:
    """How one use case is served.

    Attributes:
        use_case: The use case this policy applies to
        providers: Fallback chain; tried in ascending rank order
        temperature: Sampling temperature passed to every provider
        max_tokens: Generation limit passed to every provider
        degraded_responder: Stub builder used when the chain is exhausted
    """

    use_case: UseCase
    providers: Sequence[ProviderSpec]
    temperature: float = 0.7
    max_tokens: int = 1000
    degraded_responder: Optional[DegradedResponder] = None
    ordered_providers: List[ProviderSpec] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "ordered_providers",
            sorted(self.providers, key=lambda spec: spec.rank),
        )

    def invoke_params(self, request_params: Mapping[str, Any]) -> InvokeParams:
        return InvokeParams(
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            request_params=request_params,
        )


class FallbackOrchestrator:
    """Serves generation and transcription requests over provider chains."""

    def __init__(
        self,
        policies: Mapping[UseCase, UseCasePolicy],
        executor: Optional[RetryExecutor] = None,
    ):
        """Initialize the orchestrator.

        Args:
            policies: Policy per use case; unlisted use cases cannot be served
            executor: Retry executor (a default one is created if omitted)
        """
        self.policies = dict(policies)
        self.executor = executor or RetryExecutor()

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Serve a validated text-generation request.

        Args:
            request: Request built with GenerationRequest.create

        Returns:
            GenerationResult from the first provider whose response parsed,
            or a degraded stub result

        Raises:
            ExhaustedError: If every provider failed and no stub exists
        """
        policy = self._policy_for(request.use_case)
        prompt = build_prompt(request)
        params = policy.invoke_params(request.params)

        def parse(raw: Any) -> Any:
            logger.debug(
                f"Raw {request.use_case.value} response digest={response_digest(raw)} "
                f"excerpt={raw[:120]!r}"
            )
            return extract(raw, request.output_schema, request.item_limit)

        def degraded() -> Any:
            if policy.degraded_responder is None:
                return None
            return policy.degraded_responder(request)

        return self._run_chain(
            policy,
            lambda spec: spec.provider.invoke(prompt, params),
            parse,
            degraded,
        )

    def transcribe(self, audio: bytes) -> GenerationResult:
        """Transcribe recorded audio over the transcription chain.

        Raises:
            ExhaustedError: If every transcription provider failed
        """
        policy = self._policy_for(UseCase.TRANSCRIPTION)
        params = policy.invoke_params({})

        def parse(transcript: Any) -> TranscriptResult:
            result = validate_model(transcript, TranscriptResult)
            if not result.text.strip():
                raise ParseError("Transcript is empty")
            return result

        return self._run_chain(
            policy,
            lambda spec: spec.provider.invoke(audio, params),
            parse,
            lambda: None,
        )

    def _policy_for(self, use_case: UseCase) -> UseCasePolicy:
        policy = self.policies.get(use_case)
        if policy is None:
            logger.error(f"No policy configured for use case '{use_case.value}'")
            raise ExhaustedError(use_case.value, [])
        if not policy.ordered_providers:
            logger.warning(
                f"No providers available for {use_case.value}",
                extra={"use_case": use_case.value},
            )
        return policy

    def _run_chain(
        self,
        policy: UseCasePolicy,
        invoke: Callable[[ProviderSpec], Any],
        parse: Callable[[Any], Any],
        degraded: Callable[[], Any],
    ) -> GenerationResult:
        use_case = policy.use_case
        failures: List[ProviderFailure] = []

        for spec in policy.ordered_providers:
            log_extra = {"use_case": use_case.value, "provider": spec.name}
            logger.info(
                f"Trying provider {spec.name} ({spec.provider.model}) for {use_case.value}",
                extra=log_extra,
            )
            outcome = self.executor.execute(
                lambda spec=spec: invoke(spec), spec.retry, spec.name
            )

            if not isinstance(outcome, Success):
                kind = "fatal" if isinstance(outcome, FatalFailure) else "retries exhausted"
                logger.warning(
                    f"Provider {spec.name} failed for {use_case.value} ({kind}): "
                    f"{outcome.cause}",
                    extra=log_extra,
                )
                failures.append(
                    ProviderFailure(spec.name, outcome.cause, outcome.attempts)
                )
                continue

            try:
                value = parse(outcome.payload)
            except ParseError as e:
                logger.warning(
                    f"Unparseable {use_case.value} response from {spec.name}: {e}",
                    extra=log_extra,
                )
                failures.append(ProviderFailure(spec.name, e, outcome.attempts))
                continue

            logger.info(
                f"Served {use_case.value} with {spec.name} after "
                f"{len(failures)} failed provider(s)",
                extra=log_extra,
            )
            return GenerationResult(
                use_case=use_case,
                value=value,
                provider=spec.name,
                degraded=False,
                failures=failures,
            )

        stub = degraded()
        if stub is not None:
            logger.warning(
                f"All providers failed for {use_case.value}; returning stub content",
                extra={"use_case": use_case.value, "provider": STUB_PROVIDER_NAME},
            )
            return GenerationResult(
                use_case=use_case,
                value=stub,
                provider=STUB_PROVIDER_NAME,
                degraded=True,
                failures=failures,
            )

        error = ExhaustedError(use_case.value, failures)
        logger.error(str(error), extra={"use_case": use_case.value})
        raise error
