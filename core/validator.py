from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Dict

from .errors import (
    InvalidEnumError,
    MalformedInputError,
    MissingFieldError,
    RangeError,
    TypeMismatchError,
)
from .schema import FieldKind, FieldSpec, Schema


def kind_of(value: Any) -> str:
    """Name the JSON kind of a decoded value, as used in error details."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return FieldKind.BOOLEAN.value
    if isinstance(value, int):
        return FieldKind.INTEGER.value
    if isinstance(value, float):
        return FieldKind.NUMBER.value
    if isinstance(value, str):
        return FieldKind.STRING.value
    if isinstance(value, Mapping):
        return FieldKind.OBJECT.value
    if isinstance(value, (list, tuple)):
        return FieldKind.ARRAY.value
    return type(value).__name__


def matches_kind(kind: FieldKind, value: Any) -> bool:
    # bool is an int subclass; it never counts as a number
    if kind is FieldKind.BOOLEAN:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if kind is FieldKind.NUMBER:
        return isinstance(value, (int, float))
    if kind is FieldKind.INTEGER:
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    if kind is FieldKind.STRING:
        return isinstance(value, str)
    if kind is FieldKind.OBJECT:
        return isinstance(value, Mapping)
    if kind is FieldKind.ARRAY:
        return isinstance(value, (list, tuple))
    return False


def _check_field(name: str, spec: FieldSpec, value: Any) -> None:
    if not matches_kind(spec.kind, value):
        raise TypeMismatchError(name, spec.kind.value, kind_of(value))
    if isinstance(value, float) and not math.isfinite(value):
        raise RangeError(name, spec.min, spec.max, value)
    if spec.allowed_values is not None and value not in spec.allowed_values:
        raise InvalidEnumError(name, spec.allowed_values, value)
    if spec.min is not None and value < spec.min:
        raise RangeError(name, spec.min, spec.max, value)
    if spec.max is not None and value > spec.max:
        raise RangeError(name, spec.min, spec.max, value)


def validate(schema: Schema, raw_input: Any) -> Dict[str, Any]:
    """Check ``raw_input`` against ``schema`` and return the validated input.

    Fails fast: the first problem found is raised as a ``ValidationError``
    subclass. Required fields are checked before any field values. Fields the
    schema does not declare are passed through untouched. The returned dict
    is a shallow copy; the caller's object is not modified.
    """
    if raw_input is None and not schema.fields:
        return {}
    if not isinstance(raw_input, Mapping):
        raise MalformedInputError(kind_of(raw_input))

    for name in schema.required_in_order:
        if name not in raw_input:
            raise MissingFieldError(name)

    for name, spec in schema.fields.items():
        if name in raw_input:
            _check_field(name, spec, raw_input[name])

    return dict(raw_input)
