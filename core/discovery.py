from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .registry import CapabilityInfo, ToolRegistry


@dataclass(frozen=True)
class DiscoveryDocument:
    server_name: str
    capabilities: Tuple[CapabilityInfo, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serverName": self.server_name,
            "capabilities": [cap.to_dict() for cap in self.capabilities],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def tools_payload(self) -> Dict[str, Any]:
        """The MCP ``tools/list`` result shape."""
        return {"tools": [cap.to_dict() for cap in self.capabilities]}


def describe(registry: ToolRegistry, server_name: str) -> DiscoveryDocument:
    return DiscoveryDocument(server_name=server_name, capabilities=tuple(registry.list()))
