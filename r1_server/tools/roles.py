"""Admin role tools - Custom roles and privilege groups.

Tools: r1.roles.query, r1.role.create, r1.role.update, r1.role.delete,
       r1.privilege_groups.query, r1.privilege_group.create,
       r1.privilege_group.update, r1.privilege_group.delete

Role and privilege-group activities report COMPLETED / FAILED instead of the
SUCCESS + endDatetime convention used by the venue family, and the endpoints may
also answer synchronously.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import PollingArgs, TRACKED_OUTPUT_SCHEMA, run_tracked, tool_info
from ..activity import OperationLabel, StatusPolicy
from ..permissions import augment_features
from ..resolvers import list_privilege_groups, resolve_privilege_group_id, resolve_venue_ids
from ..session import R1Session


ROLES_PATH = "/roleAuthentications/customRoles"
PRIVILEGE_GROUPS_PATH = "/roleAuthentications/privilegeGroups"
VENUE_OBJECT_TYPE = "com.ruckus.cloud.venue.model.venue"


# =============================================================================
# MODELS
# =============================================================================

class ArgsRolesQuery(BaseModel):
    pass


class ArgsRoleCreate(PollingArgs):
    name: str = Field(min_length=1, max_length=64)
    description: Optional[str] = Field(default=None)
    features: List[str] = Field(
        min_length=1,
        description="Permission tokens, e.g. ['wifi.venue-c', 'switch-u']. Implied read permissions are added.",
    )


class ArgsRoleUpdate(ArgsRoleCreate):
    role_id: str = Field(min_length=1)


class ArgsRoleDelete(PollingArgs):
    role_id: str = Field(min_length=1)


class ArgsPrivilegeGroupsQuery(BaseModel):
    pass


class ArgsPrivilegeGroupCreate(PollingArgs):
    name: str = Field(min_length=1, max_length=64)
    description: Optional[str] = Field(default=None)
    role_name: str = Field(min_length=1, description="Role granted to members, e.g. 'READ_ONLY' or a custom role name")
    venues: List[str] = Field(
        default_factory=list,
        description="Venue names or IDs the group is scoped to; empty means all venues",
    )


class ArgsPrivilegeGroupUpdate(PollingArgs):
    privilege_group: str = Field(min_length=1, description="Privilege group name or ID")
    new_name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    description: Optional[str] = Field(default=None)
    role_name: Optional[str] = Field(default=None, min_length=1)
    venues: Optional[List[str]] = Field(default=None, description="Venue names or IDs; replaces the current scope")


class ArgsPrivilegeGroupDelete(PollingArgs):
    privilege_group: str = Field(min_length=1, description="Privilege group name or ID")


def venue_policies(venue_ids: List[str]) -> List[Dict[str, str]]:
    return [{"objectType": VENUE_OBJECT_TYPE, "entityInstanceId": vid} for vid in venue_ids]


# =============================================================================
# HANDLERS
# =============================================================================

async def handle_roles_query(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    ArgsRolesQuery.model_validate(args)
    body = await session.call("GET", ROLES_PATH, operation="Query custom roles")
    return body if isinstance(body, dict) else {"data": body}


async def _save_role(session: R1Session, parsed: ArgsRoleCreate, method: str, path: str, action: str) -> Dict[str, Any]:
    augmented = augment_features(parsed.features)
    payload: Dict[str, Any] = {"name": parsed.name, "features": augmented.final_features}
    if parsed.description:
        payload["description"] = parsed.description

    resp = await session.call(method, path, operation=f"{action.capitalize()} custom role", json=payload)
    result = await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.STATUS_GATED,
        label=OperationLabel("Role", action),
    )
    result["features"] = augmented.final_features
    result["addedFeatures"] = augmented.added
    return result


async def handle_role_create(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsRoleCreate.model_validate(args)
    return await _save_role(session, parsed, "POST", ROLES_PATH, "create")


async def handle_role_update(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsRoleUpdate.model_validate(args)
    return await _save_role(session, parsed, "PUT", f"{ROLES_PATH}/{parsed.role_id}", "update")


async def handle_role_delete(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsRoleDelete.model_validate(args)
    resp = await session.call("DELETE", f"{ROLES_PATH}/{parsed.role_id}", operation="Delete custom role")
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.STATUS_GATED,
        label=OperationLabel("Role", "delete"),
    )


async def handle_privilege_groups_query(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    ArgsPrivilegeGroupsQuery.model_validate(args)
    groups = await list_privilege_groups(session)
    return {"data": groups, "totalCount": len(groups)}


async def handle_privilege_group_create(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsPrivilegeGroupCreate.model_validate(args)
    venue_ids = await resolve_venue_ids(session, parsed.venues)

    payload: Dict[str, Any] = {
        "name": parsed.name,
        "roleName": parsed.role_name,
        "delegation": False,
        "policies": venue_policies(venue_ids),
    }
    if parsed.description:
        payload["description"] = parsed.description

    resp = await session.call("POST", PRIVILEGE_GROUPS_PATH, operation="Create privilege group", json=payload)
    result = await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.STATUS_GATED,
        label=OperationLabel("Privilege group", "create"),
    )
    result["venueIds"] = venue_ids
    return result


async def handle_privilege_group_update(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    """Update a privilege group addressed by name or ID.

    Fields that are not given keep the values currently stored in the backend.
    """
    parsed = ArgsPrivilegeGroupUpdate.model_validate(args)
    group_id = await resolve_privilege_group_id(session, parsed.privilege_group)
    current = await session.call("GET", f"{PRIVILEGE_GROUPS_PATH}/{group_id}", operation="Get privilege group")
    if not isinstance(current, dict):
        current = {}

    payload: Dict[str, Any] = {
        "name": parsed.new_name or current.get("name"),
        "roleName": parsed.role_name or current.get("roleName"),
        "delegation": current.get("delegation", False),
    }
    description = parsed.description if parsed.description is not None else current.get("description")
    if description:
        payload["description"] = description

    venue_ids: Optional[List[str]] = None
    if parsed.venues is not None:
        venue_ids = await resolve_venue_ids(session, parsed.venues)
        payload["policies"] = venue_policies(venue_ids)
    elif "policies" in current:
        payload["policies"] = current["policies"]

    resp = await session.call(
        "PUT", f"{PRIVILEGE_GROUPS_PATH}/{group_id}", operation="Update privilege group", json=payload
    )
    result = await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.STATUS_GATED,
        label=OperationLabel("Privilege group", "update"),
    )
    result["privilegeGroupId"] = group_id
    if venue_ids is not None:
        result["venueIds"] = venue_ids
    return result


async def handle_privilege_group_delete(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsPrivilegeGroupDelete.model_validate(args)
    group_id = await resolve_privilege_group_id(session, parsed.privilege_group)
    resp = await session.call(
        "DELETE", f"{PRIVILEGE_GROUPS_PATH}/{group_id}", operation="Delete privilege group"
    )
    result = await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.STATUS_GATED,
        label=OperationLabel("Privilege group", "delete"),
    )
    result["privilegeGroupId"] = group_id
    return result


# =============================================================================
# TOOL INFO
# =============================================================================

TOOLS_INFO = [
    tool_info("r1.roles.query", "List custom admin roles and their permission features.", ArgsRolesQuery),
    tool_info(
        "r1.role.create",
        "Create a custom admin role. Parent read permissions implied by the requested "
        "features (e.g. 'wifi-r' for 'wifi.venue-c') are added automatically and reported in addedFeatures.",
        ArgsRoleCreate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.role.update",
        "Replace a custom role's name, description and features (with implied read permissions added).",
        ArgsRoleUpdate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info("r1.role.delete", "Delete a custom admin role.", ArgsRoleDelete, TRACKED_OUTPUT_SCHEMA),
    tool_info("r1.privilege_groups.query", "List admin privilege groups.", ArgsPrivilegeGroupsQuery),
    tool_info(
        "r1.privilege_group.create",
        "Create a privilege group granting a role, scoped to venues given by name or ID.",
        ArgsPrivilegeGroupCreate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.privilege_group.update",
        "Update a privilege group (addressed by name or ID): rename, change role or re-scope venues.",
        ArgsPrivilegeGroupUpdate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.privilege_group.delete",
        "Delete a privilege group addressed by name or ID.",
        ArgsPrivilegeGroupDelete,
        TRACKED_OUTPUT_SCHEMA,
    ),
]
