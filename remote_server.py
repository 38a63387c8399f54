import json
import logging
import sys
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
import server as mcp_server
from core.envelope import ResponseEnvelope
from core.errors import ErrorKind, ErrorResult
from observability.metrics import CONTENT_TYPE_LATEST, metrics_payload_bytes

logger = logging.getLogger(__name__)

app = FastAPI(title="Capability Dispatch Server", version=config.get_server_version())

# Permissive CORS (can be tightened via CORS_ALLOW_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"]
)


def http_status_for(kind: ErrorKind) -> int:
    if kind is ErrorKind.TOOL_NOT_FOUND:
        return 404
    if kind is ErrorKind.EXECUTION:
        return 500
    return 400


def _error_json(error: ErrorResult) -> JSONResponse:
    return JSONResponse({"error": error.to_dict()}, status_code=http_status_for(error.kind))


async def _read_json_body(request: Request) -> Any:
    """Decode the request body; an empty body means absent input."""
    body = await request.body()
    if not body.strip():
        return None
    return json.loads(body)


@app.get("/tools")
async def list_tools():
    return JSONResponse(mcp_server.get_discovery_document().to_dict())


@app.post("/tools/{name}")
async def call_tool(name: str, request: Request):
    try:
        raw_input = await _read_json_body(request)
    except ValueError:
        return _error_json(ErrorResult(ErrorKind.MALFORMED_INPUT, "Request body is not valid JSON"))
    outcome = await mcp_server.get_dispatcher().invoke(name, raw_input)
    if isinstance(outcome, ResponseEnvelope):
        return JSONResponse(outcome.to_dict())
    return _error_json(outcome)


@app.post("/rpc")
async def rpc_endpoint(request: Request):
    # Expect MCP-style JSON-RPC payload
    try:
        payload = await _read_json_body(request)
    except ValueError:
        return JSONResponse(mcp_server.rpc_error(None, mcp_server.PARSE_ERROR, "Parse error"), status_code=400)
    result = await mcp_server.handle_message(payload)
    if result is None:
        return Response(status_code=202)
    return JSONResponse(result)


@app.get("/metrics")
async def metrics():
    return Response(content=metrics_payload_bytes(), media_type=CONTENT_TYPE_LATEST)


# Entrypoint helper
def main():
    import uvicorn
    logging.basicConfig(level=config.get_log_level(), stream=sys.stderr)
    host, port = config.get_remote_bind()
    mcp_server.get_registry()
    uvicorn.run(app, host=host, port=port, log_level=config.get_log_level().lower())


if __name__ == "__main__":
    main()
