"""
Server configuration — all environment-driven settings in one place.

Values are read through getters so tests can monkeypatch the environment.
"""
from __future__ import annotations

import os
from typing import List, Optional, Tuple

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


# --- Identity ---
def get_server_name() -> str:
    return os.getenv("MCP_SERVER_NAME", "cheer-coach-mcp")


def get_server_version() -> str:
    return os.getenv("MCP_SERVER_VERSION", "1.0.0")


def get_protocol_version() -> str:
    return os.getenv("PROTOCOL_VERSION", "2024-11-05")


# --- Logging ---
def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").strip().upper()


# --- Dispatch ---
def get_tool_timeout() -> Optional[float]:
    """Per-invocation timeout in seconds; unset or 0 disables it."""
    raw = os.getenv("TOOL_TIMEOUT_SECONDS", "").strip()
    if not raw:
        return None
    value = float(raw)
    return value if value > 0 else None


def text_only_content() -> bool:
    return _flag("TEXT_ONLY_CONTENT", "0")


# --- HTTP ---
def get_remote_bind() -> Tuple[str, int]:
    host, port = os.getenv("REMOTE_BIND", "0.0.0.0:8787").rsplit(":", 1)
    return host, int(port)


def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


# --- Metrics ---
def metrics_enabled() -> bool:
    return _flag("METRICS_ENABLED", "1")


# --- Media ---
def get_media_base_url() -> str:
    return os.getenv("PUBLIC_BASE_MEDIA_URL", "https://example.com").rstrip("/")
