"""Auth tools - Bearer token retrieval and cache control.

Tools: r1.auth.token, r1.auth.invalidate
"""

from typing import Any, Dict

from pydantic import BaseModel, Field

from .base import tool_info
from ..session import R1Session


class ArgsAuthToken(BaseModel):
    force_refresh: bool = Field(default=False, description="Drop the cached token and exchange credentials again")


class ArgsAuthInvalidate(BaseModel):
    all_tenants: bool = Field(default=False, description="Clear every cached token, not just this tenant's")


async def handle_auth_token(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    """Return a valid bearer token, from cache when possible."""
    parsed = ArgsAuthToken.model_validate(args)
    if parsed.force_refresh:
        session.tokens.invalidate()
    token = await session.tokens.get_valid_token()
    return {
        "token": token,
        "region": session.region or "global",
        "cache": session.tokens.stats(),
    }


async def handle_auth_invalidate(session: R1Session, args: Dict[str, Any]) -> Dict[str, Any]:
    parsed = ArgsAuthInvalidate.model_validate(args)
    if parsed.all_tenants:
        session.tokens.clear_all()
    else:
        session.tokens.invalidate()
    return {"invalidated": True, "cache": session.tokens.stats()}


TOOLS_INFO = [
    tool_info(
        "r1.auth.token",
        "Get a RUCKUS One bearer token for the configured tenant. Tokens are cached "
        "and refreshed one minute before expiry.",
        ArgsAuthToken,
        {"type": "object", "properties": {"token": {"type": "string"}, "cache": {"type": "object"}}},
    ),
    tool_info(
        "r1.auth.invalidate",
        "Drop the cached RUCKUS One token so the next call exchanges credentials again.",
        ArgsAuthInvalidate,
    ),
]
