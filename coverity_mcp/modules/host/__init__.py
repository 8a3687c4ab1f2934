"""
Host Module - Black Box Interface

Purpose: MCP server that capability units register against
Interface: register_tool(), register_resource(), register_prompt(), handle_rpc()
Hidden: JSON-RPC framing, argument validation, stdio/HTTP transports
"""

from .server import CapabilityServer, NoArguments, RPCError, text_result
from .transports import create_http_app, run_stdio, serve_http

__all__ = [
    "CapabilityServer",
    "NoArguments",
    "RPCError",
    "create_http_app",
    "run_stdio",
    "serve_http",
    "text_result",
]
