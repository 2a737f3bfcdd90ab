"""Shape descriptions for structured model output.

A shape is a pydantic model class: it is the static type of the validated
value, the runtime validator, and the source of the JSON schema sent to the
provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

DEFAULT_SCHEMA_NAME = "StructuredResponse"

# Checked locally by the shape; strict mode does not accept them on the wire
UNSUPPORTED_STRICT_KEYWORDS = frozenset({"title", "minLength", "maxLength"})


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


@dataclass(frozen=True)
class ValidationFailure:
    """Every violation found while walking the value against the shape."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def message(self) -> str:
        return ", ".join(str(i) for i in self.issues)


@dataclass(frozen=True)
class Shaped(Generic[T]):
    value: T


ValidationResult = Union[Shaped[T], ValidationFailure]


def _issue_path(loc: tuple[Any, ...]) -> str:
    parts: list[str] = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        elif parts:
            parts.append(f".{item}")
        else:
            parts.append(str(item))
    return "".join(parts)


def validate(shape: type[T], value: Any) -> ValidationResult[T]:
    """Check ``value`` against ``shape``; never raises on bad input.

    Unknown keys are dropped by the shape's ``extra="ignore"`` config, so the
    shaped value carries exactly the declared fields.
    """
    try:
        return Shaped(shape.model_validate(value))
    except ValidationError as e:
        issues = [
            ValidationIssue(path=_issue_path(tuple(err["loc"])), message=err["msg"])
            for err in e.errors()
        ]
        return ValidationFailure(issues=issues)


def _tighten(node: Any) -> Any:
    if isinstance(node, list):
        return [_tighten(n) for n in node]
    if not isinstance(node, dict):
        return node

    out: dict[str, Any] = {}
    for key, value in node.items():
        if key in UNSUPPORTED_STRICT_KEYWORDS:
            continue
        if key in ("properties", "$defs"):
            # keys here are field / definition names, not schema keywords
            out[key] = {name: _tighten(sub) for name, sub in value.items()}
        else:
            out[key] = _tighten(value)

    if out.get("type") == "object" and "properties" in out:
        # strict mode: closed objects, every property required
        out["additionalProperties"] = False
        out["required"] = list(out["properties"])
    return out


def strict_json_schema(shape: type[BaseModel]) -> dict[str, Any]:
    """JSON schema for ``shape`` in the provider's strict structured-output dialect."""
    return _tighten(shape.model_json_schema())


def response_format(
    shape: type[BaseModel], name: str = DEFAULT_SCHEMA_NAME
) -> dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "strict": True,
            "schema": strict_json_schema(shape),
        },
    }


__all__ = [
    "DEFAULT_SCHEMA_NAME",
    "UNSUPPORTED_STRICT_KEYWORDS",
    "ValidationIssue",
    "ValidationFailure",
    "Shaped",
    "ValidationResult",
    "validate",
    "strict_json_schema",
    "response_format",
]
