"""Base models and helpers for R1 MCP tools.

This module contains shared Pydantic models, helper functions,
and common utilities used across all tool modules.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import AliasChoices, BaseModel, Field

from ..activity import OperationLabel, PollOutcome, StatusPolicy
from ..config import AppConfig
from ..session import R1Session


# =============================================================================
# COMMON ARGUMENT MODELS
# =============================================================================

class PollingArgs(BaseModel):
    """Polling overrides accepted by every mutating tool."""
    max_retries: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("max_retries", "maxRetries"),
        description="Maximum activity status checks (default: 5)",
    )
    poll_interval_ms: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("poll_interval_ms", "pollIntervalMs"),
        description="Delay between status checks in milliseconds (default: 2000)",
    )


class QueryArgs(BaseModel):
    """Paging, filtering and sorting for /query endpoints."""
    fields: Optional[List[str]] = Field(default=None, description="Fields to return")
    filters: Dict[str, Any] = Field(default_factory=dict, description="Field filters, e.g. {\"venueId\": [\"...\"]}")
    search_string: Optional[str] = Field(default=None, description="Free-text search")
    search_target_fields: Optional[List[str]] = Field(default=None, description="Fields the search applies to")
    page: int = Field(default=1, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1, description="Rows per page")
    sort_field: Optional[str] = Field(default=None)
    sort_order: Optional[Literal["ASC", "DESC"]] = Field(default=None)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def query_payload(
    parsed: QueryArgs,
    cfg: AppConfig,
    *,
    default_fields: List[str],
    default_sort_field: str = "name",
    default_search_fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "fields": parsed.fields or default_fields,
        "filters": parsed.filters,
        "page": parsed.page,
        "pageSize": parsed.page_size or cfg.query.page_size,
        "sortField": parsed.sort_field or default_sort_field,
        "sortOrder": parsed.sort_order or cfg.query.sort_order,
    }
    if parsed.search_string:
        payload["searchString"] = parsed.search_string
        payload["searchTargetFields"] = parsed.search_target_fields or default_search_fields or ["name"]
    elif default_search_fields:
        payload["searchTargetFields"] = parsed.search_target_fields or default_search_fields
    return payload


def outcome_content(outcome: PollOutcome) -> List[Dict[str, str]]:
    """MCP content block summarising a tracked operation."""
    icon = {"completed": "✅", "failed": "❌"}.get(outcome.status, "⏳")
    text = f"{icon} {outcome.message}"
    if outcome.activity_id:
        text += f"\nActivity: {outcome.activity_id}"
    if outcome.error:
        text += f"\nError: {outcome.error}"
    if outcome.status == "timeout":
        text += "\nThe operation may still complete; check the activity later."
    return [{"type": "text", "text": text}]


async def run_tracked(
    session: R1Session,
    response: Any,
    polling: PollingArgs,
    *,
    policy: StatusPolicy,
    label: OperationLabel,
    require_tracking_id: bool = False,
) -> Dict[str, Any]:
    """Wait for a mutating call to settle and merge the outcome into its response."""
    outcome = await session.track(
        response,
        policy=policy,
        label=label,
        require_tracking_id=require_tracking_id,
        max_retries=polling.max_retries,
        poll_interval_ms=polling.poll_interval_ms,
    )
    result: Dict[str, Any] = dict(response) if isinstance(response, dict) else {"response": response}
    result.update(outcome.to_dict())
    result["content"] = outcome_content(outcome)
    return result


def tool_info(
    name: str,
    description: str,
    args_model: Type[BaseModel],
    output_schema: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "input_schema": args_model.model_json_schema(),
        "output_schema": output_schema or {"type": "object"},
    }


TRACKED_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "status": {"type": "string", "enum": ["completed", "failed", "timeout"]},
        "message": {"type": "string"},
        "activityId": {"type": "string"},
        "activityDetails": {"type": "object"},
        "error": {"type": "string"},
    },
}
