"""Name-to-id resolution for entities referenced by name in tool arguments."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .errors import NotFoundError
from .session import R1Session


_CANONICAL_ID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def is_canonical_id(value: str) -> bool:
    return bool(_CANONICAL_ID_RE.match(value.strip()))


def _rows(body: Any) -> List[Dict[str, Any]]:
    if isinstance(body, list):
        return [r for r in body if isinstance(r, dict)]
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return [r for r in body["data"] if isinstance(r, dict)]
    return []


def _match(kind: str, name: str, rows: List[Dict[str, Any]]) -> str:
    for row in rows:
        if row.get("name") == name and row.get("id"):
            return str(row["id"])
    raise NotFoundError(kind, name, [str(r.get("name")) for r in rows if r.get("name") is not None])


async def list_venues(session: R1Session) -> List[Dict[str, Any]]:
    payload = {
        "fields": ["id", "name"],
        "filters": {},
        "sortField": "name",
        "sortOrder": session.cfg.query.sort_order,
        "page": 1,
        "pageSize": session.cfg.query.page_size,
    }
    body = await session.call("POST", "/venues/query", operation="Query venues", json=payload)
    return _rows(body)


async def list_privilege_groups(session: R1Session) -> List[Dict[str, Any]]:
    body = await session.call(
        "GET", "/roleAuthentications/privilegeGroups", operation="Query privilege groups"
    )
    return _rows(body)


async def resolve_venue_ids(session: R1Session, names: List[str]) -> List[str]:
    """Map venue names (or ids) to ids; the venue list is fetched at most once."""
    rows: Optional[List[Dict[str, Any]]] = None
    ids: List[str] = []
    for name in names:
        if is_canonical_id(name):
            ids.append(name.strip())
            continue
        if rows is None:
            rows = await list_venues(session)
        ids.append(_match("Venue", name, rows))
    return ids


async def resolve_privilege_group_id(session: R1Session, name: str) -> str:
    if is_canonical_id(name):
        return name.strip()
    return _match("Privilege group", name, await list_privilege_groups(session))
