"""Venue tools - Query, inspect, create, update and delete venues.

Tools: r1.venues.query, r1.venue.get, r1.venue.create, r1.venue.update, r1.venue.delete

Venue mutations always answer with a requestId; a response without one is a
protocol error rather than a synchronous success.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .base import PollingArgs, QueryArgs, TRACKED_OUTPUT_SCHEMA, query_payload, run_tracked, tool_info
from ..activity import OperationLabel, StatusPolicy
from ..session import R1Session


# =============================================================================
# MODELS
# =============================================================================

class ArgsVenuesQuery(QueryArgs):
    pass


class ArgsVenueGet(BaseModel):
    venue_id: str = Field(min_length=1, description="Venue ID")


class VenueFields(BaseModel):
    name: str = Field(min_length=1, max_length=255, description="Venue name")
    description: Optional[str] = Field(default=None)
    address_line: str = Field(min_length=1, description="Street address")
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    timezone: Optional[str] = Field(default=None, description="IANA time zone, e.g. 'Asia/Tokyo'")


class ArgsVenueCreate(VenueFields, PollingArgs):
    pass


class ArgsVenueUpdate(VenueFields, PollingArgs):
    venue_id: str = Field(min_length=1)


class ArgsVenueDelete(PollingArgs):
    venue_id: str = Field(min_length=1)


def venue_payload(parsed: VenueFields) -> Dict[str, Any]:
    address: Dict[str, Any] = {
        "addressLine": parsed.address_line,
        "city": parsed.city,
        "country": parsed.country,
    }
    for key in ("latitude", "longitude", "timezone"):
        value = getattr(parsed, key)
        if value is not None:
            address[key] = value
    payload: Dict[str, Any] = {"name": parsed.name, "address": address}
    if parsed.description:
        payload["description"] = parsed.description
    return payload


# =============================================================================
# HANDLERS
# =============================================================================

async def handle_venues_query(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsVenuesQuery.model_validate(args)
    payload = query_payload(
        parsed,
        session.cfg,
        default_fields=["id", "name"],
        default_search_fields=session.cfg.query.venue_search_fields,
    )
    return await session.call("POST", "/venues/query", operation="Query venues", json=payload)


async def handle_venue_get(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsVenueGet.model_validate(args)
    return await session.call("GET", f"/venues/{parsed.venue_id}", operation="Get venue")


async def handle_venue_create(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsVenueCreate.model_validate(args)
    resp = await session.call("POST", "/venues", operation="Create venue", json=venue_payload(parsed))
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("Venue", "create"),
        require_tracking_id=True,
    )


async def handle_venue_update(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsVenueUpdate.model_validate(args)
    resp = await session.call(
        "PUT", f"/venues/{parsed.venue_id}", operation="Update venue", json=venue_payload(parsed)
    )
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("Venue", "update"),
        require_tracking_id=True,
    )


async def handle_venue_delete(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsVenueDelete.model_validate(args)
    resp = await session.call("DELETE", f"/venues/{parsed.venue_id}", operation="Delete venue")
    return await run_tracked(
        session, resp, parsed,
        policy=StatusPolicy.END_DATETIME_GATED,
        label=OperationLabel("Venue", "delete"),
        require_tracking_id=True,
    )


# =============================================================================
# TOOL INFO
# =============================================================================

TOOLS_INFO = [
    tool_info(
        "r1.venues.query",
        "Query venues with filtering, free-text search and paging. Returns {data, totalCount}.",
        ArgsVenuesQuery,
    ),
    tool_info("r1.venue.get", "Get the full configuration of one venue by ID.", ArgsVenueGet),
    tool_info(
        "r1.venue.create",
        "Create a venue and wait for the backend activity to finish. "
        "Returns status completed, failed or timeout.",
        ArgsVenueCreate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.venue.update",
        "Update a venue's name, description and address, then wait for completion.",
        ArgsVenueUpdate,
        TRACKED_OUTPUT_SCHEMA,
    ),
    tool_info(
        "r1.venue.delete",
        "Delete a venue and wait for the backend activity to finish.",
        ArgsVenueDelete,
        TRACKED_OUTPUT_SCHEMA,
    ),
]
