"""R1 MCP Tools Package.

This package provides all MCP tools for RUCKUS One management.
Tools are organized by category for better maintainability.

Categories:
- auth: Bearer token (r1.auth.token, r1.auth.invalidate)
- activity: Activity status (r1.activity.get)
- venues: Venues (r1.venues.query, r1.venue.get/create/update/delete)
- ap_groups: AP groups (r1.ap_groups.query, r1.ap_group.create/update/delete)
- aps: Access points (r1.aps.query, r1.ap.get/update/move/remove)
- wifi: WiFi networks (r1.wifi_networks.query, r1.wifi_network.get)
- directory: Directory server profiles (r1.directory_profiles.query, r1.directory_profile.*)
- roles: Custom roles and privilege groups (r1.roles.query, r1.role.*, r1.privilege_group*)
"""

from typing import Any, Dict, List, Optional

from ..api_models import RequestContext, ToolInfo
from ..authz import authorize_tool
from ..config import AppConfig
from ..session import R1Session

from .auth import handle_auth_token, handle_auth_invalidate, TOOLS_INFO as AUTH_TOOLS_INFO
from .activity import handle_activity_get, TOOLS_INFO as ACTIVITY_TOOLS_INFO
from .venues import (
    handle_venues_query,
    handle_venue_get,
    handle_venue_create,
    handle_venue_update,
    handle_venue_delete,
    TOOLS_INFO as VENUE_TOOLS_INFO,
)
from .ap_groups import (
    handle_ap_groups_query,
    handle_ap_group_create,
    handle_ap_group_update,
    handle_ap_group_delete,
    TOOLS_INFO as AP_GROUP_TOOLS_INFO,
)
from .aps import (
    handle_aps_query,
    handle_ap_get,
    handle_ap_update,
    handle_ap_move,
    handle_ap_remove,
    TOOLS_INFO as AP_TOOLS_INFO,
)
from .wifi import handle_wifi_networks_query, handle_wifi_network_get, TOOLS_INFO as WIFI_TOOLS_INFO
from .directory import (
    handle_directory_profiles_query,
    handle_directory_profile_get,
    handle_directory_profile_create,
    handle_directory_profile_update,
    handle_directory_profile_delete,
    TOOLS_INFO as DIRECTORY_TOOLS_INFO,
)
from .roles import (
    handle_roles_query,
    handle_role_create,
    handle_role_update,
    handle_role_delete,
    handle_privilege_groups_query,
    handle_privilege_group_create,
    handle_privilege_group_update,
    handle_privilege_group_delete,
    TOOLS_INFO as ROLE_TOOLS_INFO,
)


# =============================================================================
# TOOL REGISTRY
# =============================================================================

# Map tool names to handlers
TOOL_HANDLERS = {
    # Auth
    "r1.auth.token": handle_auth_token,
    "r1.auth.invalidate": handle_auth_invalidate,
    # Activity
    "r1.activity.get": handle_activity_get,
    # Venues
    "r1.venues.query": handle_venues_query,
    "r1.venue.get": handle_venue_get,
    "r1.venue.create": handle_venue_create,
    "r1.venue.update": handle_venue_update,
    "r1.venue.delete": handle_venue_delete,
    # AP groups
    "r1.ap_groups.query": handle_ap_groups_query,
    "r1.ap_group.create": handle_ap_group_create,
    "r1.ap_group.update": handle_ap_group_update,
    "r1.ap_group.delete": handle_ap_group_delete,
    # APs
    "r1.aps.query": handle_aps_query,
    "r1.ap.get": handle_ap_get,
    "r1.ap.update": handle_ap_update,
    "r1.ap.move": handle_ap_move,
    "r1.ap.remove": handle_ap_remove,
    # WiFi
    "r1.wifi_networks.query": handle_wifi_networks_query,
    "r1.wifi_network.get": handle_wifi_network_get,
    # Directory
    "r1.directory_profiles.query": handle_directory_profiles_query,
    "r1.directory_profile.get": handle_directory_profile_get,
    "r1.directory_profile.create": handle_directory_profile_create,
    "r1.directory_profile.update": handle_directory_profile_update,
    "r1.directory_profile.delete": handle_directory_profile_delete,
    # Roles
    "r1.roles.query": handle_roles_query,
    "r1.role.create": handle_role_create,
    "r1.role.update": handle_role_update,
    "r1.role.delete": handle_role_delete,
    "r1.privilege_groups.query": handle_privilege_groups_query,
    "r1.privilege_group.create": handle_privilege_group_create,
    "r1.privilege_group.update": handle_privilege_group_update,
    "r1.privilege_group.delete": handle_privilege_group_delete,
}

# Collect all tool info
ALL_TOOLS_INFO = (
    AUTH_TOOLS_INFO
    + ACTIVITY_TOOLS_INFO
    + VENUE_TOOLS_INFO
    + AP_GROUP_TOOLS_INFO
    + AP_TOOLS_INFO
    + WIFI_TOOLS_INFO
    + DIRECTORY_TOOLS_INFO
    + ROLE_TOOLS_INFO
)


# =============================================================================
# PUBLIC API
# =============================================================================

async def call_tool(
    session: R1Session,
    ctx: Optional[RequestContext],
    tool: str,
    args: Dict[str, Any],
) -> Dict[str, Any]:
    """Execute a tool by name.

    Args:
        session: R1 session (config, HTTP client, token service)
        ctx: Request context (user, correlation ID, scopes)
        tool: Tool name (e.g., 'r1.venue.create')
        args: Tool arguments

    Returns:
        Tool result as dictionary

    Raises:
        KeyError: If tool not found
        ValueError: If arguments invalid
        PermissionError: If not authorized
        R1Error: If the RUCKUS One API call fails
    """
    if tool not in TOOL_HANDLERS:
        raise KeyError(f"Unknown tool: {tool}")

    authorize_tool(ctx, session.cfg.authz, tool)

    handler = TOOL_HANDLERS[tool]
    result = await handler(session, args or {})
    if not isinstance(result, dict):
        return {"data": result}
    return result


def tool_infos(cfg: Optional[AppConfig] = None) -> List[ToolInfo]:
    """Get list of all available tools.

    Args:
        cfg: Optional config; scopes from authz.tool_scopes are attached

    Returns:
        List of ToolInfo objects
    """
    scopes = cfg.authz.tool_scopes if cfg else {}
    tools = [
        ToolInfo(
            name=info["name"],
            description=info["description"],
            input_schema=info["input_schema"],
            output_schema=info.get("output_schema", {}),
            required_scopes=scopes.get(info["name"], []),
        )
        for info in ALL_TOOLS_INFO
    ]
    return sorted(tools, key=lambda t: t.name)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "call_tool",
    "tool_infos",
    "TOOL_HANDLERS",
]
