"""
MCP capability server.

Holds tool, resource and prompt registrations and answers MCP JSON-RPC 2.0
requests for them. Transports (stdio, HTTP) feed requests into handle_rpc.

Shared dependencies for handlers (the Coverity client, config provider) are
attached to ``server.state`` at boot, the same way a FastAPI app carries
``app.state``.
"""

import inspect
import json
import logging
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger("coverity_mcp.host")

LATEST_PROTOCOL_VERSION = "2025-03-26"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

ToolHandler = Callable[[Any], Awaitable[Dict[str, Any]]]
ResourceHandler = Callable[[], Awaitable[str]]
PromptHandler = Callable[[Any], Awaitable[List[Dict[str, Any]]]]


class NoArguments(BaseModel):
    """Input model for capabilities that take no parameters."""

    model_config = ConfigDict(extra="ignore")


class RPCError(Exception):
    """Error that maps directly onto a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


def text_result(text: str) -> Dict[str, Any]:
    """Tool result envelope with a single text block."""
    return {"content": [{"type": "text", "text": text}]}


def rpc_ok(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def rpc_error(rpc_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": RPCError(code, message, data).to_dict()}


@dataclass
class ToolRegistration:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: ToolHandler

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_model.model_json_schema(),
            "annotations": {"readOnlyHint": True},
        }


@dataclass
class ResourceRegistration:
    uri: str
    name: str
    description: str
    mime_type: str
    handler: ResourceHandler

    def describe(self) -> Dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


@dataclass
class PromptRegistration:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: PromptHandler

    def describe(self) -> Dict[str, Any]:
        arguments = [
            {
                "name": field.alias or field_name,
                "description": field.description or "",
                "required": field.is_required(),
            }
            for field_name, field in self.input_model.model_fields.items()
        ]
        return {"name": self.name, "description": self.description, "arguments": arguments}


def _validate(model: Type[BaseModel], arguments: Any, what: str) -> BaseModel:
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        raise RPCError(
            INVALID_PARAMS,
            f"Invalid arguments for {what}",
            json.loads(e.json(include_url=False)),
        )


class CapabilityServer:
    """In-process MCP server: registrations plus JSON-RPC dispatch."""

    def __init__(self, name: str, version: str, instructions: Optional[str] = None):
        self.name = name
        self.version = version
        self.instructions = instructions
        self.state = SimpleNamespace()
        self._tools: Dict[str, ToolRegistration] = {}
        self._resources: Dict[str, ResourceRegistration] = {}
        self._prompts: Dict[str, PromptRegistration] = {}

    # Registration

    def register_tool(
        self,
        name: str,
        *,
        description: str,
        handler: ToolHandler,
        input_model: Type[BaseModel] = NoArguments,
    ) -> None:
        if name in self._tools:
            logger.warning(f"Tool {name} registered twice; keeping the latest")
        self._tools[name] = ToolRegistration(name, description, input_model, handler)
        logger.debug(f"Registered tool {name}")

    def register_resource(
        self,
        uri: str,
        *,
        name: str,
        description: str,
        handler: ResourceHandler,
        mime_type: str = "application/json",
    ) -> None:
        if uri in self._resources:
            logger.warning(f"Resource {uri} registered twice; keeping the latest")
        self._resources[uri] = ResourceRegistration(uri, name, description, mime_type, handler)
        logger.debug(f"Registered resource {uri}")

    def register_prompt(
        self,
        name: str,
        *,
        description: str,
        handler: PromptHandler,
        input_model: Type[BaseModel] = NoArguments,
    ) -> None:
        if name in self._prompts:
            logger.warning(f"Prompt {name} registered twice; keeping the latest")
        self._prompts[name] = PromptRegistration(name, description, input_model, handler)
        logger.debug(f"Registered prompt {name}")

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    @property
    def resource_uris(self) -> List[str]:
        return list(self._resources)

    @property
    def prompt_names(self) -> List[str]:
        return list(self._prompts)

    # Invocation

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Validate arguments and run a tool handler.

        A handler that raises yields an ``isError`` result rather than a
        JSON-RPC error, so the calling model sees the failure text.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise RPCError(INVALID_PARAMS, f"Unknown tool: {name}")

        params = _validate(tool.input_model, arguments, f"tool {name}")
        try:
            result = tool.handler(params)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}")
            return {"content": [{"type": "text", "text": f"Error: {e}"}], "isError": True}

    async def read_resource(self, uri: str) -> Dict[str, Any]:
        resource = self._resources.get(uri)
        if resource is None:
            raise RPCError(INVALID_PARAMS, f"Unknown resource: {uri}")

        text = await resource.handler()
        return {"contents": [{"uri": uri, "mimeType": resource.mime_type, "text": text}]}

    async def get_prompt(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        prompt = self._prompts.get(name)
        if prompt is None:
            raise RPCError(INVALID_PARAMS, f"Unknown prompt: {name}")

        params = _validate(prompt.input_model, arguments, f"prompt {name}")
        messages = await prompt.handler(params)
        return {"description": prompt.description, "messages": messages}

    def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        result: Dict[str, Any] = {
            "protocolVersion": version,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
                "prompts": {"listChanged": False},
            },
            "serverInfo": {"name": self.name, "version": self.version},
        }
        if self.instructions:
            result["instructions"] = self.instructions
        return result

    async def _dispatch(self, method: str, params: Dict[str, Any]) -> Any:
        if method == "initialize":
            return self._initialize(params)
        if method == "ping":
            return {}
        if method == "tools/list":
            return {"tools": [t.describe() for t in self._tools.values()]}
        if method == "tools/call":
            return await self.call_tool(params.get("name", ""), params.get("arguments"))
        if method == "resources/list":
            return {"resources": [r.describe() for r in self._resources.values()]}
        if method == "resources/read":
            return await self.read_resource(params.get("uri", ""))
        if method == "prompts/list":
            return {"prompts": [p.describe() for p in self._prompts.values()]}
        if method == "prompts/get":
            return await self.get_prompt(params.get("name", ""), params.get("arguments"))
        raise RPCError(METHOD_NOT_FOUND, f"Method not found: {method}")

    async def handle_rpc(self, req: Any) -> Optional[Dict[str, Any]]:
        """
        Route a single JSON-RPC request.

        Returns:
            The response object, or None for notifications
        """
        if not isinstance(req, dict) or not isinstance(req.get("method"), str):
            rpc_id = req.get("id") if isinstance(req, dict) else None
            return rpc_error(rpc_id, INVALID_REQUEST, "Invalid Request")

        method = req["method"]
        params = req.get("params") or {}
        is_notification = "id" not in req
        rpc_id = req.get("id")

        if is_notification:
            logger.debug(f"Notification {method}")
            return None

        try:
            return rpc_ok(rpc_id, await self._dispatch(method, params))
        except RPCError as e:
            return {"jsonrpc": "2.0", "id": rpc_id, "error": e.to_dict()}
        except Exception as e:
            logger.exception(f"Unhandled error in {method}")
            return rpc_error(rpc_id, INTERNAL_ERROR, "Internal error", {"exception": str(e)})
