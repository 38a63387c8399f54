from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from .errors import DuplicateNameError, RegistryFrozenError
from .schema import EMPTY_SCHEMA, Schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capability:
    """A named operation: description, input schema and execution function.

    ``execute`` receives the validated input dict and may be sync or async.
    """

    name: str
    description: str
    schema: Schema
    execute: Callable[[Dict[str, Any]], Any]

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Tool name must be a non-empty string")
        if not callable(self.execute):
            raise ValueError(f"Tool '{self.name}' execute must be callable")


@dataclass(frozen=True)
class CapabilityInfo:
    """Discovery projection of a capability (no execute function)."""

    name: str
    description: str
    schema: Schema

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.schema.to_json_schema(),
        }


class CapabilityListing(Sequence):
    """Read-only, restartable view over one registry snapshot."""

    def __init__(self, capabilities: Tuple[Capability, ...]):
        self._capabilities = capabilities

    def __len__(self) -> int:
        return len(self._capabilities)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return CapabilityListing(self._capabilities[index])
        cap = self._capabilities[index]
        return CapabilityInfo(cap.name, cap.description, cap.schema)

    def __iter__(self) -> Iterator[CapabilityInfo]:
        for cap in self._capabilities:
            yield CapabilityInfo(cap.name, cap.description, cap.schema)


class ToolRegistry:
    """Ordered, name-keyed collection of capabilities.

    Writers are serialized by a lock and publish a new (ordered, index)
    snapshot; ``lookup`` and ``list`` read whatever snapshot is current and
    never take the lock. Call ``freeze()`` once startup registration is done.
    """

    def __init__(self, capabilities: Iterable[Capability] = ()) -> None:
        self._lock = threading.Lock()
        self._frozen = False
        self._snapshot: Tuple[Tuple[Capability, ...], Mapping[str, Capability]] = ((), {})
        for cap in capabilities:
            self.register(cap)

    def register(self, capability: Capability) -> Capability:
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(capability.name)
            ordered, index = self._snapshot
            if capability.name in index:
                raise DuplicateNameError(capability.name)
            new_index = dict(index)
            new_index[capability.name] = capability
            self._snapshot = (ordered + (capability,), new_index)
        logger.debug("Registered tool %s", capability.name)
        return capability

    def tool(self, name: str, description: str, schema: Union[Schema, Mapping[str, Any], None] = None):
        """Decorator form of ``register`` for plain functions.

        ``schema`` may be a ``Schema`` or a JSON-Schema-style dict.
        """
        if schema is None:
            schema = EMPTY_SCHEMA
        elif not isinstance(schema, Schema):
            schema = Schema.from_json_schema(schema)

        def decorator(fn: Callable[[Dict[str, Any]], Any]):
            self.register(Capability(name=name, description=description, schema=schema, execute=fn))
            return fn

        return decorator

    def freeze(self) -> "ToolRegistry":
        with self._lock:
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Optional[Capability]:
        return self._snapshot[1].get(name)

    def list(self) -> CapabilityListing:
        return CapabilityListing(self._snapshot[0])

    def names(self) -> Tuple[str, ...]:
        return tuple(cap.name for cap in self._snapshot[0])

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot[1]

    def __len__(self) -> int:
        return len(self._snapshot[0])
