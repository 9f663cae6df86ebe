from __future__ import annotations

from typing import List, Optional, Set

from .api_models import RequestContext
from .config import AuthzConfig


class AuthorizationError(PermissionError):
    pass


def _has_any_scope(granted: Set[str], required: List[str]) -> bool:
    if not required:
        return True
    return any(r in granted for r in required)


def authorize_tool(ctx: Optional[RequestContext], cfg: AuthzConfig, tool_name: str) -> None:
    required = cfg.tool_scopes.get(tool_name, [])
    granted = set((ctx.scopes if ctx else None) or [])

    if cfg.require_scopes and not granted:
        raise AuthorizationError("Missing scopes in request context")

    if not _has_any_scope(granted, required):
        raise AuthorizationError(f"Missing required scopes for tool {tool_name}: {required}")
