import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

import config
from core.discovery import describe
from core.dispatcher import Dispatcher
from core.envelope import ResponseEnvelope
from core.errors import ErrorKind, ErrorResult
from core.registry import Capability, ToolRegistry
from handlers import media, practice, progress, subscription

logger = logging.getLogger(__name__)

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
TOOL_EXECUTION_ERROR = -32000


def _register_all_handlers(registry: ToolRegistry) -> None:
    """Register all capability handlers with the registry"""
    # Subscription
    registry.register(Capability(
        "check_subscription",
        "Checks if a user has an active subscription (stub for now).",
        subscription.CHECK_SUBSCRIPTION_SCHEMA,
        subscription.handle_check_subscription,
    ))
    # Practice
    registry.register(Capability(
        "get_practice_plan",
        "Returns a practice plan by age band, level, and time.",
        practice.PRACTICE_PLAN_SCHEMA,
        practice.handle_get_practice_plan,
    ))
    # Media
    registry.register(Capability(
        "get_media",
        "Return video/PDF/image links for a topic and age-band.",
        media.GET_MEDIA_SCHEMA,
        media.handle_get_media,
    ))
    registry.register(Capability(
        "list_media",
        "Lists media topics available by role and age band.",
        media.LIST_MEDIA_SCHEMA,
        media.handle_list_media,
    ))
    # Progress
    registry.register(Capability(
        "log_progress",
        "Logs a skill completion (stub).",
        progress.LOG_PROGRESS_SCHEMA,
        progress.handle_log_progress,
    ))


def build_registry() -> ToolRegistry:
    """Assemble the startup registry once and freeze it.

    A DuplicateNameError here aborts startup.
    """
    registry = ToolRegistry()
    _register_all_handlers(registry)
    return registry.freeze()


# Singleton registry/dispatcher for the process
_registry_singleton: Optional[ToolRegistry] = None
_dispatcher_singleton: Optional[Dispatcher] = None


def get_registry() -> ToolRegistry:
    global _registry_singleton
    if _registry_singleton is None:
        _registry_singleton = build_registry()
        logger.info("Registered %d tools: %s", len(_registry_singleton), ", ".join(_registry_singleton.names()))
    return _registry_singleton


def get_dispatcher() -> Dispatcher:
    global _dispatcher_singleton
    if _dispatcher_singleton is None:
        _dispatcher_singleton = Dispatcher(get_registry(), timeout=config.get_tool_timeout())
    return _dispatcher_singleton


def get_discovery_document():
    return describe(get_registry(), config.get_server_name())


# --- JSON-RPC helpers ---

def _rpc_result(msg_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "result": result}


def rpc_error(msg_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": msg_id, "error": error}


def rpc_code_for(kind: ErrorKind) -> int:
    if kind is ErrorKind.TOOL_NOT_FOUND:
        return METHOD_NOT_FOUND
    if kind is ErrorKind.EXECUTION:
        return TOOL_EXECUTION_ERROR
    return INVALID_PARAMS


async def handle_tool_call(message: Dict[str, Any]) -> Dict[str, Any]:
    """Handle a ``tools/call`` request through the dispatcher"""
    params = message.get("params") or {}
    if not isinstance(params, dict):
        return rpc_error(message.get("id"), INVALID_PARAMS, "params must be an object")
    tool_name = params.get("name")
    if not isinstance(tool_name, str) or not tool_name:
        return rpc_error(message.get("id"), INVALID_PARAMS, "Missing tool name")

    outcome = await get_dispatcher().invoke(tool_name, params.get("arguments"))
    if isinstance(outcome, ResponseEnvelope):
        return _rpc_result(message.get("id"), outcome.to_dict(text_only=config.text_only_content()))
    return _error_response(message.get("id"), outcome)


def _error_response(msg_id: Any, error: ErrorResult) -> Dict[str, Any]:
    return rpc_error(msg_id, rpc_code_for(error.kind), error.message, error.to_dict())


async def handle_message(message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Handle incoming MCP messages"""
    msg_id = message.get("id") if isinstance(message, dict) else None
    try:
        if not isinstance(message, dict):
            return rpc_error(None, INVALID_REQUEST, "Request must be a JSON object")
        method = message.get("method")

        if method == "initialize":
            return _rpc_result(msg_id, {
                "protocolVersion": config.get_protocol_version(),
                "capabilities": {
                    "tools": {"listChanged": False}
                },
                "serverInfo": {
                    "name": config.get_server_name(),
                    "version": config.get_server_version(),
                },
            })
        elif method == "notifications/initialized":
            return None
        elif method == "ping":
            return _rpc_result(msg_id, {})
        elif method == "tools/list":
            return _rpc_result(msg_id, get_discovery_document().tools_payload())
        elif method == "tools/call":
            return await handle_tool_call(message)
        else:
            return rpc_error(msg_id, METHOD_NOT_FOUND, f"Method not found: {method}")
    except Exception as e:
        logger.exception("Error handling message: %s", e)
        return rpc_error(msg_id, INTERNAL_ERROR, "Internal error")


# --- stdio transport ---

async def serve_stdio(stdin_b=None, stdout_b=None) -> None:
    """Read JSON-RPC messages from stdin until EOF.

    Accepts newline-delimited JSON or ``Content-Length`` framed messages and
    answers in the framing of the first framed message seen.
    """
    stdin_b = stdin_b or sys.stdin.buffer
    stdout_b = stdout_b or sys.stdout.buffer
    loop = asyncio.get_running_loop()
    use_headers = False

    def _send(obj: Dict[str, Any]) -> None:
        body = json.dumps(obj).encode("utf-8")
        if use_headers:
            stdout_b.write(f"Content-Length: {len(body)}\r\n\r\n".encode("utf-8"))
            stdout_b.write(body)
        else:
            stdout_b.write(body + b"\n")
        stdout_b.flush()

    while True:
        line = await loop.run_in_executor(None, stdin_b.readline)
        if not line:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower().startswith(b"content-length:"):
            use_headers = True
            try:
                length = int(stripped.split(b":", 1)[1].strip())
            except ValueError:
                logger.error("Invalid Content-Length header: %r", stripped)
                continue
            # consume remaining headers until blank line
            while True:
                header = await loop.run_in_executor(None, stdin_b.readline)
                if not header or header in (b"\r\n", b"\n"):
                    break
            raw = await loop.run_in_executor(None, stdin_b.read, length)
        else:
            raw = stripped
        try:
            message = json.loads(raw.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON received: %s", e)
            _send(rpc_error(None, PARSE_ERROR, "Parse error"))
            continue
        response = await handle_message(message)
        if response is not None:
            _send(response)


def main():
    """Main entry point for the stdio server"""
    logging.basicConfig(level=config.get_log_level(), stream=sys.stderr)
    try:
        registry = get_registry()
    except Exception as e:
        logger.error("Server startup error: %s", e)
        sys.exit(1)
    logger.info("%s v%s starting with %d tools", config.get_server_name(), config.get_server_version(), len(registry))
    try:
        asyncio.run(serve_stdio())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
