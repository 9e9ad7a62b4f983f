"""
MCP Protocol Endpoints

JSON-RPC 2.0 over HTTP: POST /mcp takes a single request or a batch,
routes each entry by method and shapes the replies. tools/call is handed
to the tool bridge; whatever goes wrong there is reported inside a tool
result flagged isError, not as a JSON-RPC error.
"""

import json
from typing import Any, Awaitable, Callable, Optional, Union

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, TypeAdapter, ValidationError

from napkin_bridge.configs import get_logger
from napkin_bridge.configs.constants import (
    INTERNAL_ERROR,
    JSONRPC_VERSION,
    PROTOCOL_VERSION,
)
from napkin_bridge.controllers.http.deps import get_gateway
from napkin_bridge.exceptions import (
    BridgeError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
)
from napkin_bridge.state import GatewayState
from napkin_bridge.tools import list_tools
from napkin_bridge.version import get_server_info

logger = get_logger("http.mcp")

router = APIRouter()


# --- Request/Response Models ---


class JsonRpcRequest(BaseModel):
    """One JSON-RPC request. A missing or null id makes it a notification."""

    jsonrpc: str
    id: Any = None
    method: str
    params: Any = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolCallResult(BaseModel):
    """Result payload for tools/call."""

    content: list[TextContent]
    isError: Optional[bool] = None


_BATCH = TypeAdapter(list[JsonRpcRequest])


def jsonrpc_result(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def jsonrpc_error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def parse_message(body: bytes) -> Union[JsonRpcRequest, list[JsonRpcRequest]]:
    """
    Parse a POST body into a request or a batch of requests.

    Raises:
        ParseError: Body is not JSON, or not a valid request/batch
    """
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise ParseError(f"Parse error: {e}") from e

    try:
        if isinstance(payload, list):
            return _BATCH.validate_python(payload)
        return JsonRpcRequest.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "request"
        raise ParseError(f"Parse error: {location}: {first['msg']}") from e


# --- Method Handlers ---

MethodHandler = Callable[[GatewayState, Any], Awaitable[Optional[Any]]]


async def _initialize(gateway: GatewayState, params: Any) -> dict[str, Any]:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {}},
        "serverInfo": get_server_info(),
    }


async def _initialized(gateway: GatewayState, params: Any) -> None:
    return None


async def _ping(gateway: GatewayState, params: Any) -> dict[str, Any]:
    return {}


async def _tools_list(gateway: GatewayState, params: Any) -> dict[str, Any]:
    logger.info("MCP tools/list requested")
    return {"tools": list_tools()}


async def _tools_call(gateway: GatewayState, params: Any) -> dict[str, Any]:
    """
    Execute a tool in the editor through the bridge.

    Args:
        params: {"name": tool name, "arguments": tool arguments}

    Returns:
        Tool result with the editor's value as pretty-printed JSON text,
        or an isError result carrying the bridge failure message
    """
    if not isinstance(params, dict):
        params = {}
    tool_name = params.get("name")
    if not isinstance(tool_name, str):
        tool_name = ""
    arguments = params.get("arguments")
    if arguments is None:
        arguments = {}

    logger.info(f"MCP tools/call: {tool_name}")

    try:
        value = await gateway.bridge.invoke(tool_name, arguments)
    except BridgeError as e:
        return ToolCallResult(
            content=[TextContent(text=e.message)],
            isError=True,
        ).model_dump(exclude_none=True)

    text = json.dumps(value, indent=2, ensure_ascii=False, default=str)
    return ToolCallResult(content=[TextContent(text=text)]).model_dump(exclude_none=True)


METHOD_HANDLERS: dict[str, MethodHandler] = {
    "initialize": _initialize,
    "notifications/initialized": _initialized,
    "ping": _ping,
    "tools/list": _tools_list,
    "tools/call": _tools_call,
}


def get_method_handler(method: str) -> MethodHandler:
    handler = METHOD_HANDLERS.get(method)
    if handler is None:
        raise MethodNotFoundError(method)
    return handler


async def handle_request(gateway: GatewayState, request: JsonRpcRequest) -> Optional[dict[str, Any]]:
    """
    Run one JSON-RPC request.

    Returns:
        The reply envelope, or None when no reply is due (notifications and
        methods that produce nothing)
    """
    try:
        handler = get_method_handler(request.method)
        result = await handler(gateway, request.params)
    except ProtocolError as e:
        logger.warning(f"JSON-RPC error {e.code} for {request.method}: {e.message}")
        reply = jsonrpc_error(request.id, e.code, e.message)
    except Exception as e:
        logger.exception(f"Unhandled error in {request.method}: {e}")
        reply = jsonrpc_error(request.id, INTERNAL_ERROR, "Internal error")
    else:
        reply = None if result is None else jsonrpc_result(request.id, result)

    if request.is_notification:
        return None
    return reply


# --- Endpoints ---


@router.post("/mcp")
async def mcp_post(request: Request, gateway: GatewayState = Depends(get_gateway)) -> Response:
    """
    Handle a JSON-RPC request or batch.

    Single request: 200 with the reply, or 202 with no body when no reply is due.
    Batch: 200 with the list of replies (possibly empty), in request order.
    Malformed body: 200 with a -32700 error and a null id.
    """
    body = await request.body()
    try:
        message = parse_message(body)
    except ParseError as e:
        logger.warning(f"Rejected MCP request: {e.message}")
        return JSONResponse(jsonrpc_error(None, e.code, e.message))

    if isinstance(message, list):
        replies = []
        for entry in message:
            reply = await handle_request(gateway, entry)
            if reply is not None:
                replies.append(reply)
        return JSONResponse(replies)

    reply = await handle_request(gateway, message)
    if reply is None:
        return Response(status_code=202)
    return JSONResponse(reply)
