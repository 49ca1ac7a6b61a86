"""Turn raw provider text into typed results.

Models wrap JSON in markdown fences, prepend chatty preambles, leave
trailing commas and occasionally cut a response short. Extraction
locates the payload, parses it strictly, falls back to ``json_repair``
and finally validates against the pydantic model declared for the use
case. Anything that still does not fit raises ``ParseError`` so the
orchestrator can move on to the next provider.
"""

import json
import logging
import re
from typing import Any, List, Optional

import json_repair
from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import ParseError
from .models import OutputSchema

logger = logging.getLogger(__name__)

EXCERPT_CHARS = 200

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?\s*```\s*$")
_FENCE_BLOCK = re.compile(r"```[a-zA-Z0-9_-]*\s*\n(.*?)```", re.DOTALL)

# "1.", "2)", "-", "*" and "•" list markers
_ENUMERATION = re.compile(r"^\s*(?:\d+\s*[.)]|[-*•])\s*")


def _excerpt(text: str) -> str:
    return text[:EXCERPT_CHARS]


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences around (or inside) a response.

    Args:
        text: Raw provider response

    Returns:
        The fenced content when a fenced block is present, otherwise the
        stripped text
    """
    stripped = text.strip()
    block = _FENCE_BLOCK.search(stripped)
    if block:
        return block.group(1).strip()
    stripped = _FENCE_OPEN.sub("", stripped)
    stripped = _FENCE_CLOSE.sub("", stripped)
    return stripped.strip()


def _balanced_object(text: str, start: int) -> Optional[str]:
    """Return text[start:] up to the brace matching text[start], if any."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def locate_payload(text: str, kind: str) -> Optional[str]:
    """Find the JSON object or array inside surrounding prose.

    Objects are located from the first ``{`` to its balanced closing
    brace; arrays span the first ``[`` through the last ``]``. A
    truncated object (no matching brace) is returned from its opening
    brace to the end so repair can still close it.

    Args:
        text: Fence-stripped response text
        kind: "object" or "array"

    Returns:
        The candidate payload, or None when no opening bracket exists
    """
    if kind == "object":
        start = text.find("{")
        if start == -1:
            return None
        return _balanced_object(text, start) or text[start:]

    start = text.find("[")
    if start == -1:
        return None
    end = text.rfind("]")
    if end < start:
        return text[start:]
    return text[start : end + 1]


def repair_json(payload: str) -> Any:
    """Parse malformed JSON with ``json_repair``.

    Raises:
        ParseError: If nothing usable could be recovered
    """
    try:
        repaired = json_repair.loads(payload)
    except (ValueError, RecursionError) as e:
        raise ParseError(f"JSON repair failed: {e}", _excerpt(payload)) from e
    # json_repair returns "" when the input holds no JSON at all
    if repaired == "" or repaired is None:
        raise ParseError("JSON repair recovered nothing", _excerpt(payload))
    return repaired


def _parse_json(text: str, kind: str) -> Any:
    payload = locate_payload(text, kind)
    if payload is None:
        raise ParseError(f"No JSON {kind} found in response", _excerpt(text))
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        logger.debug(f"Strict JSON parse failed ({e}); attempting repair")
        return repair_json(payload)


def _validate(data: Any, schema: OutputSchema) -> Any:
    model = schema.model
    if schema.kind == "object":
        if not isinstance(data, dict):
            raise ParseError(
                f"Expected a JSON object, got {type(data).__name__}",
                _excerpt(str(data)),
            )
        if model is None:
            return data
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ParseError(
                f"Response does not match {model.__name__}: {e.error_count()} error(s)",
                _excerpt(json.dumps(data, default=str)),
            ) from e

    if not isinstance(data, list):
        raise ParseError(
            f"Expected a JSON array, got {type(data).__name__}",
            _excerpt(str(data)),
        )
    if schema.non_empty and not data:
        raise ParseError("Expected a non-empty JSON array")
    if model is None:
        return data
    try:
        return TypeAdapter(List[model]).validate_python(data)  # type: ignore[valid-type]
    except ValidationError as e:
        raise ParseError(
            f"Array items do not match {model.__name__}: {e.error_count()} error(s)",
            _excerpt(json.dumps(data, default=str)),
        ) from e


def renumber_lines(text: str, limit: Optional[int] = None) -> List[str]:
    """Normalize a numbered list into "1. ...", "2. ...".

    Blank lines are dropped and any existing enumeration or bullet is
    replaced so the numbering is contiguous.

    Args:
        text: Raw list text
        limit: Keep at most this many items

    Returns:
        Renumbered items
    """
    items = []
    for line in text.splitlines():
        content = _ENUMERATION.sub("", line).strip()
        if content:
            items.append(content)
    if limit is not None:
        items = items[:limit]
    return [f"{index}. {item}" for index, item in enumerate(items, start=1)]


def _extract_text(text: str, single_line: bool) -> str:
    value = text.strip()
    if single_line:
        value = next((line.strip() for line in value.splitlines() if line.strip()), "")
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1].strip()
    if not value:
        raise ParseError("Response contained no text")
    return value


def extract(raw_text: str, schema: OutputSchema, limit: Optional[int] = None) -> Any:
    """Extract a typed value from a raw provider response.

    Args:
        raw_text: Text returned by a provider
        schema: Declared output shape for the use case
        limit: Maximum number of items for "lines" outputs

    Returns:
        A pydantic model, list of models, list of strings or string,
        depending on ``schema.kind``

    Raises:
        ParseError: If the response cannot be turned into the schema
    """
    if not raw_text or not raw_text.strip():
        raise ParseError("Empty response")

    text = strip_code_fences(raw_text)

    if schema.kind == "lines":
        lines = renumber_lines(text, limit)
        if not lines:
            raise ParseError("Response contained no list items", _excerpt(raw_text))
        return lines

    if schema.kind == "text":
        return _extract_text(text, schema.single_line)

    data = _parse_json(text, schema.kind)
    return _validate(data, schema)


def validate_model(value: Any, model: type[BaseModel]) -> BaseModel:
    """Validate an already-structured value (e.g. a transcript) against a model.

    Raises:
        ParseError: If the value does not fit the model
    """
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise ParseError(
            f"Value does not match {model.__name__}: {e.error_count()} error(s)"
        ) from e
