"""MCP SSE (Server-Sent Events) endpoint for streamable-HTTP MCP clients.

This module provides a JSON-RPC over Server-Sent Events endpoint so MCP
clients can list and call the R1 tools, and read the token and venue
resources, without the /v1 REST wrapper.
"""

from __future__ import annotations

import ipaddress
import json
import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import StreamingResponse

from .api_models import RequestContext
from .errors import R1Error, classify_error
from .session import R1Session
from .tools import call_tool, tool_infos
from .tools.venues import handle_venues_query

logger = logging.getLogger("r1_server.mcp_sse")

PROTOCOL_VERSION = "2024-11-05"

TOKEN_RESOURCE = "ruckus://auth/token"
VENUES_RESOURCE = "ruckus://venues/list"

# uri -> (name, description)
RESOURCES = {
    TOKEN_RESOURCE: ("Ruckus Auth Token", "Current RUCKUS One JWT token"),
    VENUES_RESOURCE: ("Ruckus Venues", "List of venues from RUCKUS One"),
}


class MCPSSEHandler:
    """Handler for MCP Server-Sent Events protocol."""

    def __init__(self, session: R1Session, user_context: Optional[Dict[str, str]] = None):
        self.session = session
        self.user_context = user_context or {}

    async def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle MCP initialize request."""
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {
                "name": "r1-server",
                "version": "0.1.0",
                "vendor": "RUCKUS Networks",
            },
            "capabilities": {
                "tools": {},
                "resources": {},
            },
        }

    async def handle_tools_list(self) -> Dict[str, Any]:
        """Handle MCP tools/list request."""
        tools = tool_infos(self.session.cfg)
        return {
            "tools": [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "inputSchema": tool.input_schema,
                }
                for tool in tools
            ]
        }

    async def handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle MCP tools/call request.

        Tool failures are reported in-band as ``isError`` content; R1 errors
        also carry their category and JSON-RPC code in ``_meta``.
        """
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}

        meta = params.get("_meta") or {}
        subject = self.user_context.get("subject") or meta.get("subject")
        correlation_id = self.user_context.get("request_id") or meta.get("requestId")

        logger.info(
            "tool_call",
            extra={"tool": tool_name, "subject": subject, "correlation_id": correlation_id},
        )

        ctx = RequestContext(subject=subject, correlation_id=correlation_id, scopes=meta.get("scopes"))

        try:
            data = await call_tool(self.session, ctx, tool_name, arguments)
        except R1Error as e:
            category = classify_error(e)
            logger.warning(
                "tool_call_failed",
                extra={"tool": tool_name, "subject": subject, "category": category.value, "error": str(e)},
            )
            return {
                "content": [{"type": "text", "text": f"Error executing {tool_name}: {e}"}],
                "isError": True,
                "_meta": {"category": category.value, "rpcCode": category.rpc_code},
            }
        except Exception as e:
            logger.exception("tool_call_failed", extra={"tool": tool_name, "subject": subject})
            return {
                "content": [{"type": "text", "text": f"Error executing {tool_name}: {e}"}],
                "isError": True,
            }

        if data.get("content"):
            content = data.pop("content")
        else:
            content = [{"type": "text", "text": json.dumps(data, indent=2)}]

        logger.info("tool_call_ok", extra={"tool": tool_name, "subject": subject})
        return {"content": content, "structuredContent": data, "isError": False}

    async def handle_resources_list(self) -> Dict[str, Any]:
        """Handle MCP resources/list request."""
        return {
            "resources": [
                {
                    "uri": uri,
                    "name": name,
                    "description": description,
                    "mimeType": "application/json",
                }
                for uri, (name, description) in RESOURCES.items()
            ]
        }

    async def handle_resources_read(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle MCP resources/read request.

        Unknown URIs and backend failures are reported in-band as ``isError``
        content, like tool failures.
        """
        uri = params.get("uri")
        if uri not in RESOURCES:
            return {"content": [{"type": "text", "text": f"Unknown resource: {uri}"}], "isError": True}

        try:
            if uri == TOKEN_RESOURCE:
                data: Dict[str, Any] = {"token": await self.session.tokens.get_valid_token()}
            else:
                data = await handle_venues_query(self.session, {})
        except Exception as e:
            logger.warning("resource_read_failed", extra={"uri": uri, "error": str(e)})
            return {
                "content": [{"type": "text", "text": f"Error reading resource {uri}: {e}"}],
                "isError": True,
            }

        logger.info("resource_read_ok", extra={"uri": uri})
        return {
            "contents": [
                {"uri": uri, "mimeType": "application/json", "text": json.dumps(data, indent=2)}
            ]
        }

    async def dispatch(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Build the JSON-RPC response envelope for one request."""
        method = request_data.get("method")
        params = request_data.get("params") or {}
        response: Dict[str, Any] = {"jsonrpc": "2.0", "id": request_data.get("id")}

        try:
            if method == "initialize":
                response["result"] = await self.handle_initialize(params)
            elif method == "ping":
                response["result"] = {}
            elif method == "tools/list":
                response["result"] = await self.handle_tools_list()
            elif method == "tools/call":
                response["result"] = await self.handle_tools_call(params)
            elif method == "resources/list":
                response["result"] = await self.handle_resources_list()
            elif method == "resources/read":
                response["result"] = await self.handle_resources_read(params)
            else:
                response["error"] = {"code": -32601, "message": f"Method not found: {method}"}
        except Exception as e:
            logger.exception("sse_dispatch_failed", extra={"method": method})
            response["error"] = {"code": -32603, "message": str(e)}
        return response

    async def stream_response(self, request_data: Dict[str, Any]) -> AsyncGenerator[str, None]:
        """Stream MCP SSE responses."""
        response = await self.dispatch(request_data)
        yield f"data: {json.dumps(response)}\n\n"


async def mcp_sse_endpoint(
    request: Request,
    session: R1Session,
    allowed_ips: Optional[str] = None,
    api_key: Optional[str] = None,
) -> StreamingResponse:
    """MCP SSE endpoint handler.

    Security:
    - IP allowlist via allowed_ips (comma-separated CIDRs)
    - Bearer token authentication via Authorization header

    User Context:
    - X-User-Email: caller identity used as the request subject
    - X-Request-ID: request correlation ID for tracing
    """
    if allowed_ips:
        client_ip = request.client.host if request.client else None
        if client_ip and not _is_ip_allowed(client_ip, allowed_ips):
            logger.warning("mcp_access_denied", extra={"client_ip": client_ip})
            raise HTTPException(status_code=403, detail="Access denied: IP not allowed")

    if api_key:
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer ") or auth_header[7:] != api_key:
            logger.warning("mcp_invalid_bearer")
            raise HTTPException(status_code=401, detail="Invalid or missing Bearer token")

    user_context = {
        "request_id": request.headers.get("X-Request-ID", f"req-{id(request)}"),
    }
    if request.headers.get("X-User-Email"):
        user_context["subject"] = request.headers["X-User-Email"]

    try:
        body = await request.json()
    except ValueError as e:
        message = f"Parse error: {e}"
        logger.warning("mcp_parse_error", extra={"error": str(e)})

        async def error_stream():
            error = {
                "jsonrpc": "2.0",
                "id": None,
                "error": {"code": -32700, "message": message},
            }
            yield f"data: {json.dumps(error)}\n\n"

        return StreamingResponse(error_stream(), media_type="text/event-stream")

    handler = MCPSSEHandler(session, user_context)
    return StreamingResponse(
        handler.stream_response(body),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


def _is_ip_allowed(client_ip: str, allowed_cidrs: str) -> bool:
    """Check if client IP is in a comma-separated CIDR list."""
    try:
        client_addr = ipaddress.ip_address(client_ip)
        for cidr in allowed_cidrs.split(","):
            cidr = cidr.strip()
            if not cidr:
                continue
            if client_addr in ipaddress.ip_network(cidr, strict=False):
                return True
        return False
    except ValueError as e:
        logger.error("invalid_cidr", extra={"error": str(e)})
        return False
