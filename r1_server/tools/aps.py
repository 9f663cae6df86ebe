"""Access point tools - Query, inspect, update, move and remove APs.

Tools: r1.aps.query, r1.ap.get, r1.ap.update, r1.ap.move, r1.ap.remove
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .base import PollingArgs, QueryArgs, TRACKED_OUTPUT_SCHEMA, query_payload, run_tracked, tool_info
from ..activity import OperationLabel, StatusPolicy
from ..session import R1Session


DEFAULT_AP_FIELDS = [
    "name", "serialNumber", "model", "status", "macAddress", "venueId", "venueName",
    "apGroupId", "apGroupName", "firmwareVersion", "clientCount",
]


# =============================================================================
# MODELS
# =============================================================================

class ArgsApsQuery(QueryArgs):
    venue_id: Optional[str] = Field(default=None, description="Restrict to one venue")


class ArgsApGet(BaseModel):
    serial_number: str = Field(min_length=1, description="AP serial number")


class ArgsApUpdate(PollingArgs):
    venue_id: str = Field(min_length=1, description="Venue the AP currently belongs to")
    serial_number: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1, max_length=32)
    description: Optional[str] = Field(default=None)
    new_venue_id: Optional[str] = Field(default=None, description="Move the AP to this venue")
    ap_group_id: Optional[str] = Field(default=None, description="Move the AP to this AP group")


class ArgsApMove(PollingArgs):
    venue_id: str = Field(min_length=1, description="Target venue ID")
    ap_group_id: str = Field(min_length=1, description="Target AP group ID")
    serial_number: str = Field(min_length=1)


class ArgsApRemove(PollingArgs):
    venue_id: str = Field(min_length=1)
    serial_number: str = Field(min_length=1)


# =============================================================================
# HANDLERS
# =============================================================================

async def handle_aps_query(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsApsQuery.model_validate(args)
    payload = query_payload(
        parsed,
        session.cfg,
        default_fields=DEFAULT_AP_FIELDS,
        default_search_fields=["name", "serialNumber", "macAddress"],
    )
    if parsed.venue_id:
        payload["filters"] = {**payload["filters"], "venueId": [parsed.venue_id]}
    return await session.call("POST", "/venues/aps/query", operation="Query APs", json=payload)


async def handle_ap_get(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsApGet.model_validate(args)
    return await session.call("GET", f"/venues/aps/{parsed.serial_number}", operation="Get AP details")


async def handle_ap_update(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    """Update AP properties; unspecified fields keep their current values."""
    parsed = ArgsApUpdate.model_validate(args)
    if not any([parsed.name, parsed.description, parsed.new_venue_id, parsed.ap_group_id]):
        raise ValueError("Nothing to update: provide name, description, new_venue_id or ap_group_id")

    current = await session.call(
        "GET", f"/venues/{parsed.venue_id}/aps/{parsed.serial_number}", operation="Get AP details"
    )
    if not isinstance(current, dict):
        current = {}
    payload: Dict[str, Any] = {
        "serialNumber": parsed.serial_number,
        "name": parsed.name or current.get("name"),
        "venueId": parsed.new_venue_id or parsed.venue_id,
    }
    description = parsed.description if parsed.description is not None else current.get("description")
    if description:
        payload["description"] = description
    ap_group_id = parsed.ap_group_id or current.get("apGroupId")
    if ap_group_id:
        payload["apGroupId"] = ap_group_id

    resp = await session.call(
        "PUT",
        f"/venues/{parsed.venue_id}/aps/{parsed.serial_number}",
        operation="Update AP",
        json=payload,
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("AP", "update"),
    )


async def handle_ap_move(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    """Place an AP into an AP group (also moves it between venues)."""
    parsed = ArgsApMove.model_validate(args)
    resp = await session.call(
        "PUT",
        f"/venues/{parsed.venue_id}/apGroups/{parsed.ap_group_id}/aps/{parsed.serial_number}",
        operation="Move AP",
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("AP", "move"),
    )


async def handle_ap_remove(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsApRemove.model_validate(args)
    resp = await session.call(
        "DELETE",
        f"/venues/{parsed.venue_id}/aps/{parsed.serial_number}",
        operation="Remove AP",
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("AP", "remove"),
    )


# =============================================================================
# TOOL INFO
# =============================================================================

TOOLS_INFO = [
    tool_info(
        "r1.aps.query",
        "Query access points with filtering, search (name, serial, MAC) and paging.",
        ArgsApsQuery,
    ),
    tool_info("r1.ap.get", "Get details of one access point by serial number.", ArgsApGet),
    tool_info(
        "r1.ap.update",
        "Update an AP's name or description, or move it to another venue / AP group. "
        "Fields not given keep their current values.",
        ArgsApUpdate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.ap.move",
        "Move an AP into an AP group and wait for completion.",
        ArgsApMove,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.ap.remove",
        "Remove an AP from its venue and wait for completion.",
        ArgsApRemove,
        TRACKED_OUTPUT_SCHEMA,
    ),
]
