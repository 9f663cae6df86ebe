from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional


# <family>-c / -u / -d on a top-level family, e.g. "wifi-c"
_FAMILY_WRITE_RE = re.compile(r"^([A-Za-z0-9_]+)-[cud]$")


@dataclass(frozen=True)
class AugmentResult:
    final_features: List[str]
    added: List[str] = field(default_factory=list)


def parent_read_permission(feature: str) -> Optional[str]:
    """Return the family read permission a feature implies, if any.

    "wifi.venue-c" -> "wifi-r", "admin-u" -> "admin-r", "wifi-r" -> None
    """
    if "." in feature:
        family = feature.split(".", 1)[0]
        return f"{family}-r" if family else None
    m = _FAMILY_WRITE_RE.match(feature)
    if m:
        return f"{m.group(1)}-r"
    return None


def augment_features(features: Iterable[str]) -> AugmentResult:
    """Add the parent read permissions a custom role needs.

    Deterministic and idempotent: augmenting an already augmented list adds
    nothing.
    """
    final: List[str] = []
    added: List[str] = []
    seen = set()

    requested = [f.strip() for f in features if f and f.strip()]
    requested_set = set(requested)

    for feature in requested:
        if feature not in seen:
            seen.add(feature)
            final.append(feature)
        parent = parent_read_permission(feature)
        if parent and parent not in seen:
            seen.add(parent)
            final.append(parent)
            if parent not in requested_set:
                added.append(parent)

    return AugmentResult(final_features=final, added=added)
