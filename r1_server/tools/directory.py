"""Directory server profile tools - LDAP / Active Directory profiles.

Tools: r1.directory_profiles.query, r1.directory_profile.get, r1.directory_profile.create,
       r1.directory_profile.update, r1.directory_profile.delete
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from .base import PollingArgs, QueryArgs, TRACKED_OUTPUT_SCHEMA, query_payload, run_tracked, tool_info
from ..activity import OperationLabel, StatusPolicy
from ..session import R1Session


# =============================================================================
# MODELS
# =============================================================================

class ArgsDirectoryProfilesQuery(QueryArgs):
    pass


class ArgsDirectoryProfileGet(BaseModel):
    profile_id: str = Field(min_length=1, description="Directory server profile ID")


class DirectoryProfileFields(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    type: Literal["LDAP", "AD"] = Field(default="LDAP", description="Directory server type")
    host: str = Field(min_length=1, description="Server hostname or IP address")
    port: int = Field(default=389, ge=1, le=65535)
    tls_enabled: Optional[bool] = Field(default=None, serialization_alias="tlsEnabled")
    domain_name: Optional[str] = Field(
        default=None, serialization_alias="domainName", description="Base DN, e.g. 'dc=example,dc=com'"
    )
    admin_domain_name: Optional[str] = Field(
        default=None, serialization_alias="adminDomainName", description="Bind DN of the admin account"
    )
    admin_password: Optional[str] = Field(default=None, serialization_alias="adminPassword", repr=False)
    key_attribute: Optional[str] = Field(default=None, serialization_alias="keyAttribute")
    search_filter: Optional[str] = Field(default=None, serialization_alias="searchFilter")


_PROFILE_FIELDS = set(DirectoryProfileFields.model_fields)


class ArgsDirectoryProfileCreate(DirectoryProfileFields, PollingArgs):
    pass


class ArgsDirectoryProfileUpdate(DirectoryProfileFields, PollingArgs):
    profile_id: str = Field(min_length=1)


class ArgsDirectoryProfileDelete(PollingArgs):
    profile_id: str = Field(min_length=1)


def directory_profile_payload(parsed: DirectoryProfileFields) -> Dict[str, Any]:
    return parsed.model_dump(include=_PROFILE_FIELDS, exclude_none=True, by_alias=True)


# =============================================================================
# HANDLERS
# =============================================================================

async def handle_directory_profiles_query(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsDirectoryProfilesQuery.model_validate(args)
    payload = query_payload(parsed, session.cfg, default_fields=["id", "name", "type", "host", "port"])
    return await session.call(
        "POST", "/directoryServerProfiles/query", operation="Query directory server profiles", json=payload
    )


async def handle_directory_profile_get(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsDirectoryProfileGet.model_validate(args)
    return await session.call(
        "GET", f"/directoryServerProfiles/{parsed.profile_id}", operation="Get directory server profile"
    )


async def handle_directory_profile_create(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsDirectoryProfileCreate.model_validate(args)
    resp = await session.call(
        "POST",
        "/directoryServerProfiles",
        operation="Create directory server profile",
        json=directory_profile_payload(parsed),
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("Directory server profile", "create"),
    )


async def handle_directory_profile_update(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsDirectoryProfileUpdate.model_validate(args)
    resp = await session.call(
        "PUT",
        f"/directoryServerProfiles/{parsed.profile_id}",
        operation="Update directory server profile",
        json=directory_profile_payload(parsed),
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("Directory server profile", "update"),
    )


async def handle_directory_profile_delete(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsDirectoryProfileDelete.model_validate(args)
    resp = await session.call(
        "DELETE",
        f"/directoryServerProfiles/{parsed.profile_id}",
        operation="Delete directory server profile",
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("Directory server profile", "delete"),
    )


# =============================================================================
# TOOL INFO
# =============================================================================

TOOLS_INFO = [
    tool_info(
        "r1.directory_profiles.query",
        "Query LDAP / Active Directory server profiles.",
        ArgsDirectoryProfilesQuery,
    ),
    tool_info(
        "r1.directory_profile.get",
        "Get one directory server profile by ID.",
        ArgsDirectoryProfileGet,
    ),
    tool_info(
        "r1.directory_profile.create",
        "Create an LDAP or AD directory server profile and wait for completion.",
        ArgsDirectoryProfileCreate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.directory_profile.update",
        "Replace a directory server profile's settings and wait for completion.",
        ArgsDirectoryProfileUpdate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.directory_profile.delete",
        "Delete a directory server profile and wait for completion.",
        ArgsDirectoryProfileDelete,
        TRACKED_OUTPUT_SCHEMA,
    ),
]
