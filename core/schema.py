from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from .errors import SchemaDefinitionError


class FieldKind(str, Enum):
    """Value kinds a field can declare; values are the JSON Schema type names."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"

    @property
    def is_numeric(self) -> bool:
        return self in (FieldKind.NUMBER, FieldKind.INTEGER)


@dataclass(frozen=True)
class FieldSpec:
    kind: FieldKind
    allowed_values: Optional[Tuple[Any, ...]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    description: Optional[str] = None
    examples: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.kind, FieldKind):
            object.__setattr__(self, "kind", FieldKind(self.kind))
        if self.allowed_values is not None:
            object.__setattr__(self, "allowed_values", tuple(self.allowed_values))
        object.__setattr__(self, "examples", tuple(self.examples))
        if (self.min is not None or self.max is not None) and not self.kind.is_numeric:
            raise SchemaDefinitionError(f"min/max only apply to numeric kinds, not {self.kind.value}")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise SchemaDefinitionError(f"min {self.min} is greater than max {self.max}")

    def to_json_schema(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.kind.value}
        if self.description:
            out["description"] = self.description
        if self.allowed_values is not None:
            out["enum"] = list(self.allowed_values)
        if self.min is not None:
            out["minimum"] = self.min
        if self.max is not None:
            out["maximum"] = self.max
        if self.examples:
            out["examples"] = list(self.examples)
        return out

    @classmethod
    def from_json_schema(cls, spec: Mapping[str, Any]) -> "FieldSpec":
        try:
            kind = FieldKind(spec.get("type", "string"))
        except ValueError:
            raise SchemaDefinitionError(f"Unsupported field type {spec.get('type')!r}")
        enum = spec.get("enum")
        return cls(
            kind=kind,
            allowed_values=tuple(enum) if enum is not None else None,
            min=spec.get("minimum"),
            max=spec.get("maximum"),
            description=spec.get("description"),
            examples=tuple(spec.get("examples") or ()),
        )


@dataclass(frozen=True)
class Schema:
    """Declared input shape of a capability. Field order is preserved."""

    fields: Mapping[str, FieldSpec] = field(default_factory=dict, hash=False)
    required: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        object.__setattr__(self, "required", frozenset(self.required))
        unknown = sorted(self.required - set(self.fields))
        if unknown:
            raise SchemaDefinitionError(f"Required fields not declared: {', '.join(unknown)}")

    @classmethod
    def build(cls, required: Iterable[str] = (), **fields: FieldSpec) -> "Schema":
        return cls(fields=fields, required=frozenset(required))

    @classmethod
    def from_json_schema(cls, spec: Optional[Mapping[str, Any]]) -> "Schema":
        """Parse the ``{"type": "object", "properties": ..., "required": ...}`` shape."""
        spec = spec or {}
        if spec.get("type", "object") != "object":
            raise SchemaDefinitionError("Top-level schema must have type 'object'")
        props = spec.get("properties") or {}
        fields = {name: FieldSpec.from_json_schema(meta or {}) for name, meta in props.items()}
        return cls(fields=fields, required=frozenset(spec.get("required") or ()))

    @property
    def required_in_order(self) -> Tuple[str, ...]:
        return tuple(name for name in self.fields if name in self.required)

    def to_json_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {name: spec.to_json_schema() for name, spec in self.fields.items()},
            "required": list(self.required_in_order),
        }


EMPTY_SCHEMA = Schema()
