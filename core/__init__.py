"""Core package for the capability dispatch server.

This package houses the transport-agnostic machinery:
- schema / validator: declared input shapes and the fail-fast checker
- registry: ordered, name-keyed capability store
- dispatcher: resolve, validate, execute, normalize into envelope or error
- discovery: registry listing for clients
- envelope / errors: response content items and the error taxonomy
"""
from .discovery import DiscoveryDocument, describe
from .dispatcher import Dispatcher, invoke
from .envelope import JsonContent, ResponseEnvelope, TextContent, structured, text
from .errors import (
    CapabilityError,
    DuplicateNameError,
    ErrorKind,
    ErrorResult,
    RegistryFrozenError,
    SchemaDefinitionError,
    ValidationError,
)
from .registry import Capability, CapabilityInfo, ToolRegistry
from .schema import FieldKind, FieldSpec, Schema
from .validator import validate

__all__ = [
    "Capability",
    "CapabilityError",
    "CapabilityInfo",
    "DiscoveryDocument",
    "Dispatcher",
    "DuplicateNameError",
    "ErrorKind",
    "ErrorResult",
    "FieldKind",
    "FieldSpec",
    "JsonContent",
    "RegistryFrozenError",
    "ResponseEnvelope",
    "Schema",
    "SchemaDefinitionError",
    "TextContent",
    "ToolRegistry",
    "ValidationError",
    "describe",
    "invoke",
    "structured",
    "text",
    "validate",
]
