"""
JSON-RPC 2.0 dispatcher for the MCP tool surface.

``McpServer.process_message`` takes one raw message and returns the serialized
response, or None for notifications. Transports own framing and I/O; the
dispatcher owns parsing, routing, and envelope shaping. Protocol errors travel
as ``JsonRpcError``; tool failures are reported in-band with ``isError``.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from woo_settings_mcp.auth import Authorizer
from woo_settings_mcp.metrics import MetricsRecorder, default_metrics
from woo_settings_mcp.schema import GROUPS
from woo_settings_mcp.settings import SettingsService
from woo_settings_mcp.tools import get_setting, list_settings, update_setting

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2024-11-05"
MCP_SERVER_NAME = "woo-settings-mcp"
MCP_SERVER_VERSION = "1.0.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


class JsonRpcError(Exception):
    """Protocol-level failure, rendered as a JSON-RPC ``error`` object."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class McpMethod(str, Enum):
    INITIALIZE = "initialize"
    INITIALIZED = "initialized"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PING = "ping"


class ToolName(str, Enum):
    LIST_SETTINGS = "list_settings"
    GET_SETTING = "get_setting"
    UPDATE_SETTING = "update_setting"


ToolCallable = Callable[..., Awaitable[Dict[str, Any]]]


@dataclass(slots=True)
class ToolDefinition:
    name: ToolName
    description: str
    input_schema: Dict[str, Any]
    callable: ToolCallable
    requires_authorizer: bool = False

    @property
    def argument_names(self) -> List[str]:
        return list(self.input_schema.get("properties", {}))


TOOL_REGISTRY: Dict[ToolName, ToolDefinition] = {
    ToolName.LIST_SETTINGS: ToolDefinition(
        name=ToolName.LIST_SETTINGS,
        description=(
            "List all WooCommerce general settings with their current values, types, and allowed values."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "group": {
                    "type": "string",
                    "description": "Optional. Filter by group: store_address, general_options, or currency_options.",
                    "enum": list(GROUPS),
                },
            },
            "required": [],
        },
        callable=list_settings,
    ),
    ToolName.GET_SETTING: ToolDefinition(
        name=ToolName.GET_SETTING,
        description="Get a specific WooCommerce setting by its option name.",
        input_schema={
            "type": "object",
            "properties": {
                "option_name": {
                    "type": "string",
                    "description": "The WooCommerce option name (e.g., woocommerce_currency, woocommerce_store_address).",
                },
            },
            "required": ["option_name"],
        },
        callable=get_setting,
    ),
    ToolName.UPDATE_SETTING: ToolDefinition(
        name=ToolName.UPDATE_SETTING,
        description=(
            "Update a WooCommerce setting value. The value will be validated against WooCommerce rules."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "option_name": {
                    "type": "string",
                    "description": "The WooCommerce option name to update.",
                },
                "value": {
                    "description": "The new value for the setting. Type depends on the setting.",
                },
            },
            "required": ["option_name", "value"],
        },
        callable=update_setting,
        requires_authorizer=True,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return the tool catalog in MCP ``tools/list`` shape."""
    return [
        {
            "name": tool.name.value,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


def _wrap_tool_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shape tool outputs into an MCP content array.
    """
    # Tool-level errors are returned in-band with isError flag.
    if "error" in result:
        message = result.get("error") or "Error"
        return {"content": [{"type": "text", "text": str(message)}], "isError": True}
    return {"content": [{"type": "text", "text": json.dumps(result, indent=4)}]}


def _jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": rpc_id, "result": result}


def _jsonrpc_error_payload(rpc_id: Any, error: JsonRpcError) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": rpc_id, "error": error.to_dict()}


def _encode(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"))


class McpServer:
    """
    Stateful only in the handshake flag; ``initialize`` is recorded but never
    required before other methods.
    """

    def __init__(
        self,
        service: SettingsService,
        authorizer: Authorizer,
        *,
        metrics: MetricsRecorder = default_metrics,
    ) -> None:
        self.service = service
        self.authorizer = authorizer
        self._metrics = metrics
        self._initialized = False
        self._handlers: Dict[McpMethod, Callable[[Dict[str, Any], Authorizer], Awaitable[Dict[str, Any]]]] = {
            McpMethod.INITIALIZE: self._handle_initialize,
            McpMethod.INITIALIZED: self._handle_initialized,
            McpMethod.TOOLS_LIST: self._handle_tools_list,
            McpMethod.TOOLS_CALL: self._handle_tools_call,
            McpMethod.PING: self._handle_ping,
        }

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def process_message(
        self,
        raw: Union[bytes, str],
        *,
        authorizer: Optional[Authorizer] = None,
        request_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Handle one JSON-RPC message.

        ``authorizer`` overrides the server-wide capability check for this call,
        which is how the HTTP transport applies per-request credentials.
        """
        start_time = time.time()
        method_label: Optional[str] = None
        tool_label: Optional[str] = None

        def _respond(payload: Optional[Dict[str, Any]], *, outcome: str, error_code: Optional[int] = None) -> Optional[str]:
            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "mcp outcome=%s method=%s tool=%s id=%s duration_ms=%.2f error_code=%s",
                outcome,
                method_label,
                tool_label,
                payload.get("id") if payload else None,
                duration_ms,
                error_code,
                extra={"request_id": request_id, "method": method_label, "tool": tool_label, "error": error_code},
            )
            self._metrics.record_rpc(method_label, error_code=error_code)
            return _encode(payload) if payload is not None else None

        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            request = json.loads(text)
        except (ValueError, RecursionError):
            error = JsonRpcError(PARSE_ERROR, "Parse error")
            return _respond(_jsonrpc_error_payload(None, error), outcome="error", error_code=error.code)

        if isinstance(request, list):
            request = {}
        if not isinstance(request, dict):
            error = JsonRpcError(PARSE_ERROR, "Parse error")
            return _respond(_jsonrpc_error_payload(None, error), outcome="error", error_code=error.code)

        rpc_id = request.get("id")
        if request.get("jsonrpc") != JSONRPC_VERSION:
            error = JsonRpcError(INVALID_REQUEST, "Invalid Request: Invalid JSON-RPC version")
            return _respond(_jsonrpc_error_payload(rpc_id, error), outcome="error", error_code=error.code)

        method = request.get("method")
        if not isinstance(method, str):
            error = JsonRpcError(INVALID_REQUEST, "Invalid Request: Missing method")
            return _respond(_jsonrpc_error_payload(rpc_id, error), outcome="error", error_code=error.code)
        method_label = method

        try:
            operation = self._resolve_method(method)
            params = self._coerce_params(request.get("params"))
            if operation is McpMethod.TOOLS_CALL:
                raw_name = params.get("name")
                tool_label = raw_name if isinstance(raw_name, str) else None
            result = await self._handlers[operation](params, authorizer or self.authorizer)
        except JsonRpcError as error:
            if rpc_id is None:
                return _respond(None, outcome="notification", error_code=error.code)
            return _respond(_jsonrpc_error_payload(rpc_id, error), outcome="error", error_code=error.code)

        if rpc_id is None:
            return _respond(None, outcome="notification")
        payload = _jsonrpc_success_payload(rpc_id, result)
        return _respond(payload, outcome="success")

    async def call_tool(
        self,
        tool_name: Any,
        arguments: Optional[Dict[str, Any]] = None,
        *,
        authorizer: Optional[Authorizer] = None,
    ) -> Dict[str, Any]:
        """Dispatch to a tool by name and return the raw tool result."""
        arguments = arguments or {}
        tool = self._resolve_tool(tool_name)
        if tool is None:
            return {"error": f"Unknown tool: {tool_name}"}

        # Match arguments by declared name; anything else is ignored.
        kwargs: Dict[str, Any] = {
            name: arguments[name] for name in tool.argument_names if name in arguments
        }
        kwargs["service"] = self.service
        if tool.requires_authorizer:
            kwargs["authorizer"] = authorizer or self.authorizer
        try:
            return await tool.callable(**kwargs)
        except Exception:
            logger.exception("Unexpected error in tool %s", tool.name.value, extra={"tool": tool.name.value})
            return {"error": "Unexpected error while calling tool."}

    @staticmethod
    def _resolve_method(method: str) -> McpMethod:
        try:
            return McpMethod(method)
        except ValueError:
            raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}") from None

    @staticmethod
    def _resolve_tool(tool_name: Any) -> Optional[ToolDefinition]:
        if not isinstance(tool_name, str):
            return None
        try:
            return TOOL_REGISTRY[ToolName(tool_name)]
        except ValueError:
            return None

    @staticmethod
    def _coerce_params(raw_params: Any) -> Dict[str, Any]:
        if raw_params is None or raw_params == []:
            return {}
        if not isinstance(raw_params, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params")
        return raw_params

    async def _handle_initialize(self, params: Dict[str, Any], authorizer: Authorizer) -> Dict[str, Any]:
        client_protocol = params.get("protocolVersion")
        logger.debug("mcp initialize requested protocol=%s", client_protocol)
        self._initialized = True
        return {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
        }

    async def _handle_initialized(self, params: Dict[str, Any], authorizer: Authorizer) -> Dict[str, Any]:
        return {}

    async def _handle_tools_list(self, params: Dict[str, Any], authorizer: Authorizer) -> Dict[str, Any]:
        return {"tools": list_tools()}

    async def _handle_ping(self, params: Dict[str, Any], authorizer: Authorizer) -> Dict[str, Any]:
        return {"pong": True}

    async def _handle_tools_call(self, params: Dict[str, Any], authorizer: Authorizer) -> Dict[str, Any]:
        if params.get("name") is None:
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: missing tool name")
        tool_name = params["name"]
        arguments = params.get("arguments")
        if arguments is None or arguments == []:
            arguments = {}
        if not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: arguments must be an object")

        result = await self.call_tool(tool_name, arguments, authorizer=authorizer)
        self._log_tool_result(str(tool_name), result)
        return _wrap_tool_result(result)

    def _log_tool_result(self, tool_name: str, result: Dict[str, Any]) -> None:
        if result.get("error"):
            logger.warning(
                "tool=%s outcome=error error=%s",
                tool_name,
                result.get("error"),
                extra={"tool": tool_name, "error": result.get("error")},
            )
            self._metrics.record_tool(tool_name, success=False)
        else:
            logger.info("tool=%s outcome=success", tool_name, extra={"tool": tool_name})
            self._metrics.record_tool(tool_name, success=True)
