"""Pull the assistant message out of a chat completion and validate it."""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import BaseModel

from app.modules.generations.errors import SchemaValidationError
from app.modules.generations.schema import Shaped, validate

T = TypeVar("T", bound=BaseModel)


def _message_content(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return None
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


def extract(raw: Any, shape: type[T]) -> T:
    """Return the fully validated ``shape`` instance or raise SchemaValidationError.

    There is no best-effort mode: a reply that is empty, not JSON, or off-shape
    yields no value at all.
    """
    content = _message_content(raw)
    if not content or not isinstance(content, str):
        raise SchemaValidationError(
            "Response content is empty or in an invalid format."
        )

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise SchemaValidationError(
            f"Failed to parse or validate response: {e}"
        ) from e

    result = validate(shape, parsed)
    if isinstance(result, Shaped):
        return result.value
    raise SchemaValidationError(f"Schema validation failed: {result.message}")
