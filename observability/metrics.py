"""
Prometheus metrics for tool invocations.
Set METRICS_ENABLED=0 to turn recording into a no-op.
"""
from __future__ import annotations

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

import config

logger = logging.getLogger(__name__)

UNKNOWN_TOOL_LABEL = "<unknown>"

# Single registry for the process
_REGISTRY: Optional[CollectorRegistry] = None

# Metrics objects
INVOCATIONS_TOTAL: Optional[Counter] = None
INVOCATION_LATENCY: Optional[Histogram] = None


def _get_registry() -> CollectorRegistry:
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = CollectorRegistry()
    return _REGISTRY


def init_metrics() -> None:
    global INVOCATIONS_TOTAL, INVOCATION_LATENCY
    if INVOCATIONS_TOTAL is not None:
        return
    reg = _get_registry()
    INVOCATIONS_TOTAL = Counter(
        "mcp_tool_invocations_total",
        "Tool invocations by tool and outcome (success or error kind)",
        ["tool", "outcome"],
        registry=reg,
    )
    INVOCATION_LATENCY = Histogram(
        "mcp_tool_latency_seconds",
        "Tool invocation latency",
        ["tool"],
        registry=reg,
    )


def record_invocation(tool: str, outcome: str, latency_s: float) -> None:
    if not config.metrics_enabled():
        return
    init_metrics()
    INVOCATIONS_TOTAL.labels(tool=tool, outcome=outcome).inc()
    INVOCATION_LATENCY.labels(tool=tool).observe(max(0.0, latency_s))


def invocation_count(tool: str, outcome: str) -> float:
    """Current counter value, mainly for tests and diagnostics."""
    value = _get_registry().get_sample_value(
        "mcp_tool_invocations_total", {"tool": tool, "outcome": outcome}
    )
    return value or 0.0


def metrics_payload_bytes() -> bytes:
    init_metrics()
    return generate_latest(_get_registry())


__all__ = [
    "CONTENT_TYPE_LATEST",
    "UNKNOWN_TOOL_LABEL",
    "init_metrics",
    "invocation_count",
    "metrics_payload_bytes",
    "record_invocation",
]
