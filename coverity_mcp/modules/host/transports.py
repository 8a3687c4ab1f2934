"""
Transports for the capability server.

- stdio: newline-delimited JSON-RPC on stdin/stdout
- http: FastAPI app exposing POST /mcp and GET /health, served by uvicorn
"""

import asyncio
import json
import logging
import sys
import uuid
from typing import Optional, TextIO

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from coverity_mcp.logging_config import get_logging_config

from .server import PARSE_ERROR, CapabilityServer, rpc_error

logger = logging.getLogger("coverity_mcp.host.transports")

SESSION_HEADER = "Mcp-Session-Id"


async def run_stdio(
    server: CapabilityServer,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    """Serve JSON-RPC over stdio until stdin closes."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    loop = asyncio.get_running_loop()

    logger.info(f"{server.name} running on stdio")
    while True:
        line = await loop.run_in_executor(None, stdin.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue

        try:
            req = json.loads(line)
        except json.JSONDecodeError:
            resp = rpc_error(None, PARSE_ERROR, "Parse error")
        else:
            resp = await server.handle_rpc(req)

        if resp is not None:
            stdout.write(json.dumps(resp) + "\n")
            stdout.flush()

    logger.info("stdin closed, stopping")


def create_http_app(server: CapabilityServer) -> FastAPI:
    """Build the FastAPI application exposing the server over HTTP."""
    app = FastAPI(
        title=server.name,
        description="Coverity Connect capabilities over the Model Context Protocol",
        version=server.version,
    )
    app.state.capability_server = server

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/mcp")
    async def mcp_endpoint(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content=rpc_error(None, PARSE_ERROR, "Parse error"))

        resp = await server.handle_rpc(payload)
        if resp is None:
            return Response(status_code=202)

        headers = {}
        if isinstance(payload, dict) and payload.get("method") == "initialize":
            headers[SESSION_HEADER] = str(uuid.uuid4())
        return JSONResponse(content=resp, headers=headers)

    return app


async def serve_http(server: CapabilityServer, host: str, port: int, log_level: str = "INFO") -> None:
    """Serve the HTTP app with uvicorn inside the running event loop."""
    config = uvicorn.Config(
        create_http_app(server),
        host=host,
        port=port,
        log_level=log_level.lower(),
        log_config=get_logging_config(log_level),
    )
    logger.info(f"HTTP server listening on {host}:{port}, MCP endpoint at /mcp")
    await uvicorn.Server(config).serve()
