from __future__ import annotations

import math
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Dict, Iterable, Optional


class ErrorKind(str, Enum):
    """Stable error kinds reported to callers."""

    TOOL_NOT_FOUND = "ToolNotFound"
    MALFORMED_INPUT = "MalformedInputError"
    MISSING_FIELD = "MissingFieldError"
    TYPE_MISMATCH = "TypeMismatchError"
    INVALID_ENUM = "InvalidEnumError"
    RANGE = "RangeError"
    EXECUTION = "ExecutionError"
    DUPLICATE_NAME = "DuplicateNameError"


VALIDATION_KINDS = frozenset({
    ErrorKind.MALFORMED_INPUT,
    ErrorKind.MISSING_FIELD,
    ErrorKind.TYPE_MISMATCH,
    ErrorKind.INVALID_ENUM,
    ErrorKind.RANGE,
})


@dataclass(frozen=True)
class ErrorResult:
    """A failed invocation, returned as a value instead of an envelope."""

    kind: ErrorKind
    message: str
    details: Dict[str, Any] = dataclass_field(default_factory=dict)

    @property
    def field(self) -> Optional[str]:
        return self.details.get("field")

    @property
    def is_validation_error(self) -> bool:
        return self.kind in VALIDATION_KINDS

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        for key, value in self.details.items():
            out[key] = value
        return out


# --- Validation failures (raised by the validator, converted by the dispatcher) ---

class ValidationError(Exception):
    """Raised when a raw input does not satisfy a capability schema."""

    kind = ErrorKind.MALFORMED_INPUT

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_result(self) -> ErrorResult:
        return ErrorResult(kind=self.kind, message=self.message, details=dict(self.details))


class MalformedInputError(ValidationError):
    kind = ErrorKind.MALFORMED_INPUT

    def __init__(self, actual_kind: str):
        super().__init__(
            f"Input must be an object, got {actual_kind}",
            actualKind=actual_kind,
        )


class MissingFieldError(ValidationError):
    kind = ErrorKind.MISSING_FIELD

    def __init__(self, field_name: str):
        super().__init__(f"Missing required field '{field_name}'", field=field_name)


class TypeMismatchError(ValidationError):
    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, field_name: str, expected_kind: str, actual_kind: str):
        super().__init__(
            f"Field '{field_name}' expected {expected_kind}, got {actual_kind}",
            field=field_name,
            expectedKind=expected_kind,
            actualKind=actual_kind,
        )


class InvalidEnumError(ValidationError):
    kind = ErrorKind.INVALID_ENUM

    def __init__(self, field_name: str, allowed: Iterable[Any], actual: Any):
        allowed = list(allowed)
        super().__init__(
            f"Field '{field_name}' must be one of {allowed}, got {actual!r}",
            field=field_name,
            allowed=allowed,
            actual=actual,
        )


class RangeError(ValidationError):
    kind = ErrorKind.RANGE

    def __init__(self, field_name: str, minimum: Any, maximum: Any, actual: Any):
        super().__init__(
            f"Field '{field_name}' must be within [{_bound(minimum)}, {_bound(maximum)}], got {actual!r}",
            field=field_name,
            min=minimum,
            max=maximum,
            actual=_json_number(actual),
        )


def _bound(value: Any) -> str:
    return "unbounded" if value is None else str(value)


def _json_number(value: Any) -> Any:
    # nan and inf have no JSON form
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    return value


# --- Registration-time errors (fatal at startup) ---

class RegistryError(Exception):
    """Base class for errors raised while assembling a registry."""


class DuplicateNameError(RegistryError):
    kind = ErrorKind.DUPLICATE_NAME

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class RegistryFrozenError(RegistryError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Registry is frozen; cannot register '{name}'")


class SchemaDefinitionError(ValueError):
    """Raised when a schema declaration is internally inconsistent."""


class CapabilityError(Exception):
    """Raised by capability code for business failures with a caller-safe message."""
