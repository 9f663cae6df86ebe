"""AP group tools - Query, create, update and delete AP groups.

Tools: r1.ap_groups.query, r1.ap_group.create, r1.ap_group.update, r1.ap_group.delete
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import PollingArgs, QueryArgs, TRACKED_OUTPUT_SCHEMA, query_payload, run_tracked, tool_info
from ..activity import OperationLabel, StatusPolicy
from ..session import R1Session


# =============================================================================
# MODELS
# =============================================================================

class ArgsApGroupsQuery(QueryArgs):
    venue_id: Optional[str] = Field(default=None, description="Restrict to one venue")


class ApGroupFields(BaseModel):
    name: str = Field(min_length=1, max_length=64, description="AP group name")
    description: Optional[str] = Field(default=None)
    ap_serial_numbers: List[str] = Field(default_factory=list, description="Serial numbers of APs to place in the group")


class ArgsApGroupCreate(ApGroupFields, PollingArgs):
    venue_id: str = Field(min_length=1)


class ArgsApGroupUpdate(ApGroupFields, PollingArgs):
    venue_id: str = Field(min_length=1)
    ap_group_id: str = Field(min_length=1)


class ArgsApGroupDelete(PollingArgs):
    venue_id: str = Field(min_length=1)
    ap_group_id: str = Field(min_length=1)


def ap_group_payload(parsed: ApGroupFields, venue_id: str) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": parsed.name,
        "venueId": venue_id,
        "apSerialNumbers": [{"serialNumber": s} for s in parsed.ap_serial_numbers],
    }
    if parsed.description:
        payload["description"] = parsed.description
    return payload


# =============================================================================
# HANDLERS
# =============================================================================

async def handle_ap_groups_query(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsApGroupsQuery.model_validate(args)
    payload = query_payload(parsed, session.cfg, default_fields=["id", "name", "venueId"])
    if parsed.venue_id:
        payload["filters"] = {**payload["filters"], "venueId": [parsed.venue_id]}
    return await session.call("POST", "/venues/apGroups/query", operation="Query AP groups", json=payload)


async def handle_ap_group_create(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsApGroupCreate.model_validate(args)
    resp = await session.call(
        "POST",
        f"/venues/{parsed.venue_id}/apGroups",
        operation="Create AP group",
        json=ap_group_payload(parsed, parsed.venue_id),
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("AP group", "create"),
    )


async def handle_ap_group_update(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsApGroupUpdate.model_validate(args)
    resp = await session.call(
        "PUT",
        f"/venues/{parsed.venue_id}/apGroups/{parsed.ap_group_id}",
        operation="Update AP group",
        json=ap_group_payload(parsed, parsed.venue_id),
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("AP group", "update"),
    )


async def handle_ap_group_delete(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsApGroupDelete.model_validate(args)
    resp = await session.call(
        "DELETE",
        f"/venues/{parsed.venue_id}/apGroups/{parsed.ap_group_id}",
        operation="Delete AP group",
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("AP group", "delete"),
    )


# =============================================================================
# TOOL INFO
# =============================================================================

TOOLS_INFO = [
    tool_info(
        "r1.ap_groups.query",
        "Query AP groups, optionally within one venue. Returns {data, totalCount}.",
        ArgsApGroupsQuery,
    ),
    tool_info(
        "r1.ap_group.create",
        "Create an AP group in a venue, optionally with member APs, and wait for completion.",
        ArgsApGroupCreate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.ap_group.update",
        "Update an AP group's name, description and member APs, then wait for completion.",
        ArgsApGroupUpdate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.ap_group.delete",
        "Delete an AP group and wait for completion.",
        ArgsApGroupDelete,
        TRACKED_OUTPUT_SCHEMA,
    ),
]
