"""Validated generation requests."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from .errors import RequestValidationError
from .models import OUTPUT_SCHEMAS, PARAMS_MODELS, OutputSchema, UseCase
from .prompts import question_count


def _format_validation_error(error: ValidationError) -> list[str]:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "params"
        problems.append(f"{location}: {item['msg']}")
    return problems


@dataclass(frozen=True)
class GenerationRequest:
    """One validated request for generated content.

    Only build instances through ``create``; the constructor performs no
    validation.

    Attributes:
        use_case: Use case to serve
        params: Read-only validated parameters (snake_case keys)
        output_schema: Shape the provider response is extracted into
        item_limit: Maximum number of list items kept, when bounded
    """

    use_case: UseCase
    params: Mapping[str, Any]
    output_schema: OutputSchema
    item_limit: Optional[int] = None

    @classmethod
    def create(
        cls, use_case: Union[UseCase, str], params: Mapping[str, Any]
    ) -> "GenerationRequest":
        """Validate parameters and build a request.

        Args:
            use_case: Use case (enum member or its string value)
            params: Raw caller parameters

        Returns:
            A frozen GenerationRequest

        Raises:
            RequestValidationError: If the use case is unknown or the
                parameters are missing or malformed
        """
        try:
            use_case = UseCase(use_case)
        except ValueError:
            raise RequestValidationError(
                str(use_case), [f"unknown use case '{use_case}'"]
            )

        params_model = PARAMS_MODELS.get(use_case)
        if params_model is None:
            raise RequestValidationError(
                use_case.value, ["use case does not take generation parameters"]
            )
        if not isinstance(params, Mapping):
            raise RequestValidationError(
                use_case.value, ["params must be a mapping"]
            )

        try:
            validated = params_model.model_validate(dict(params))
        except ValidationError as e:
            raise RequestValidationError(
                use_case.value, _format_validation_error(e)
            ) from e

        values = validated.model_dump()
        item_limit = None
        if use_case == UseCase.QUESTIONS:
            item_limit = question_count(values["duration"])

        return cls(
            use_case=use_case,
            params=MappingProxyType(values),
            output_schema=OUTPUT_SCHEMAS[use_case],
            item_limit=item_limit,
        )
