from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class RequestContext(BaseModel):
    # Identifiers passed from your MCP platform
    subject: Optional[str] = Field(default=None, description="User identifier (email, username) for audit logging")
    correlation_id: Optional[str] = Field(default=None, description="Request tracing ID")
    client: Optional[str] = Field(default=None, description="Client application identifier")
    scopes: Optional[List[str]] = Field(default=None, description="Scopes granted to the caller")


class ToolCallRequest(BaseModel):
    context: RequestContext = Field(default_factory=RequestContext)
    tool: str
    args: Dict[str, Any] = Field(default_factory=dict)


class ToolCallError(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ToolCallResponse(BaseModel):
    status: Literal["ok", "error"]
    data: Optional[Dict[str, Any]] = None
    content: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        description="MCP-compatible content blocks for rich client rendering"
    )
    warnings: List[str] = Field(default_factory=list)
    error: Optional[ToolCallError] = None
    meta: Dict[str, Any] = Field(default_factory=dict)


class ToolInfo(BaseModel):
    name: str
    description: str
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    required_scopes: List[str] = Field(default_factory=list)


class ToolsListResponse(BaseModel):
    tools: List[ToolInfo]


class MCPMetadata(BaseModel):
    """MCP platform metadata endpoint response."""
    protocol_version: str = "1.0"
    server_name: str = "r1-server"
    server_version: str = "0.1.0"
    vendor: str = "RUCKUS Networks"
    capabilities: List[str] = Field(default_factory=lambda: [
        "tools",
        "activity_tracking",
        "token_caching",
    ])
    description: str = "Tool server for the RUCKUS One cloud API: venues, APs, AP groups, directory profiles and roles."
