"""Activity tool - Inspect an asynchronous backend operation.

Tool: r1.activity.get
"""

from typing import Any, Dict

from pydantic import BaseModel, Field

from .base import tool_info
from ..session import R1Session


class ArgsActivityGet(BaseModel):
    activity_id: str = Field(min_length=1, description="Activity / request ID returned by a mutating call")


async def handle_activity_get(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    """Fetch the current state of an activity once, without polling."""
    parsed = ArgsActivityGet.model_validate(args)
    record = await session.fetch_activity(parsed.activity_id)
    return {"activityId": parsed.activity_id, "activityDetails": record.to_dict()}


TOOLS_INFO = [
    tool_info(
        "r1.activity.get",
        "Get the current status of a RUCKUS One activity by its request ID. Use this to "
        "follow up on an operation that returned status 'timeout'.",
        ArgsActivityGet,
    ),
]
