"""Completion tracking for asynchronous RUCKUS One operations.

Mutating calls return a ``requestId``; the backend carries on in the
background and reports progress through the activity endpoint. Two endpoint
families report completion differently:

- END_DATETIME_GATED: status is SUCCESS / INPROGRESS / anything else, and the
  activity is finished once ``endDatetime`` is set.
- STATUS_GATED: status is COMPLETED / FAILED / anything else (still running),
  with no timestamp signal.

``poll_activity`` is the single polling loop for both; the policy is chosen per
call site.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ProtocolError


logger = logging.getLogger("r1_server.activity")


class StatusPolicy(str, enum.Enum):
    END_DATETIME_GATED = "end_datetime_gated"
    STATUS_GATED = "status_gated"


class ActivityRecord(BaseModel):
    """Snapshot of a tracked backend activity. Unknown fields are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: Optional[str] = None
    end_datetime: Optional[Any] = Field(default=None, alias="endDatetime")
    error: Optional[Any] = None
    message: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Verdict(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    IN_PROGRESS = "in_progress"


def evaluate(policy: StatusPolicy, record: ActivityRecord) -> Verdict:
    status = (record.status or "").upper()
    if policy is StatusPolicy.STATUS_GATED:
        if status == "COMPLETED":
            return Verdict.SUCCESS
        if status == "FAILED":
            return Verdict.FAILURE
        return Verdict.IN_PROGRESS

    # A status outside SUCCESS/INPROGRESS is terminal even without endDatetime.
    if status not in ("SUCCESS", "INPROGRESS"):
        return Verdict.FAILURE
    # endDatetime: null counts as absent.
    if record.end_datetime is not None:
        return Verdict.SUCCESS if status == "SUCCESS" else Verdict.FAILURE
    return Verdict.IN_PROGRESS


_ACTION_FORMS = {
    "create": ("created", "creation"),
    "update": ("updated", "update"),
    "delete": ("deleted", "deletion"),
    "move": ("moved", "move"),
    "remove": ("removed", "removal"),
    "add": ("added", "addition"),
}


@dataclass(frozen=True)
class OperationLabel:
    """Human-readable naming of a tracked operation, e.g. ("Venue", "create")."""

    entity: str
    action: str

    @property
    def _forms(self):
        return _ACTION_FORMS.get(self.action, (f"{self.action}d", self.action))

    def succeeded(self) -> str:
        return f"{self.entity} {self._forms[0]} successfully"

    def failed(self) -> str:
        return f"{self.entity} {self._forms[1]} failed"

    def timed_out(self) -> str:
        return f"{self.entity} {self._forms[1]} status unknown - polling timeout"

    def synchronous(self) -> str:
        return f"{self.succeeded()} (synchronous operation)"


@dataclass
class PollOutcome:
    status: str  # completed | failed | timeout
    message: str
    activity_id: Optional[str] = None
    record: Optional[ActivityRecord] = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "completed"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"status": self.status, "message": self.message}
        if self.activity_id:
            out["activityId"] = self.activity_id
        if self.record is not None:
            out["activityDetails"] = self.record.to_dict()
        if self.error:
            out["error"] = self.error
        return out


ActivityFetcher = Callable[[str], Awaitable[ActivityRecord]]


def _failure_text(record: ActivityRecord, fallback: str) -> str:
    for detail in (record.error, record.message):
        if detail:
            return detail if isinstance(detail, str) else str(detail)
    return fallback


async def poll_activity(
    fetch: ActivityFetcher,
    activity_id: str,
    *,
    policy: StatusPolicy,
    label: OperationLabel,
    max_attempts: int = 5,
    poll_interval_ms: int = 2000,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> PollOutcome:
    """Poll an activity until it is terminal or the attempts run out.

    Fetch failures count as attempts and are only reported if the final
    attempt also fails. At most ``max_attempts`` fetches are made and there is
    no sleep after the last one.
    """
    max_attempts = max(1, int(max_attempts))
    delay_s = max(0, poll_interval_ms) / 1000.0
    last_record: Optional[ActivityRecord] = None

    for attempt in range(1, max_attempts + 1):
        try:
            record = await fetch(activity_id)
        except Exception as exc:
            logger.warning(
                "activity_poll_fetch_failed",
                extra={
                    "activity_id": activity_id,
                    "attempt": attempt,
                    "max_attempts": max_attempts,
                    "error": str(exc),
                },
            )
            if attempt == max_attempts:
                return PollOutcome(
                    status="timeout",
                    message=label.timed_out(),
                    activity_id=activity_id,
                    record=last_record,
                    error=f"Failed to get activity status after maximum retries: {exc}",
                    attempts=attempt,
                )
            await sleep(delay_s)
            continue

        last_record = record
        verdict = evaluate(policy, record)
        if verdict is Verdict.SUCCESS:
            return PollOutcome(
                status="completed",
                message=label.succeeded(),
                activity_id=activity_id,
                record=record,
                attempts=attempt,
            )
        if verdict is Verdict.FAILURE:
            fallback = (
                "Operation completed with non-SUCCESS status"
                if record.end_datetime is not None
                else "Unknown error"
            )
            return PollOutcome(
                status="failed",
                message=label.failed(),
                activity_id=activity_id,
                record=record,
                error=_failure_text(record, fallback),
                attempts=attempt,
            )

        logger.info(
            "activity_poll_in_progress",
            extra={
                "activity_id": activity_id,
                "attempt": attempt,
                "max_attempts": max_attempts,
                "activity_status": record.status,
            },
        )
        if attempt < max_attempts:
            await sleep(delay_s)

    return PollOutcome(
        status="timeout",
        message=label.timed_out(),
        activity_id=activity_id,
        record=last_record,
        attempts=max_attempts,
    )


async def track_operation(
    response: Any,
    fetch: ActivityFetcher,
    *,
    policy: StatusPolicy,
    label: OperationLabel,
    require_tracking_id: bool = False,
    max_attempts: int = 5,
    poll_interval_ms: int = 2000,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> PollOutcome:
    """Turn the response of a mutating call into a terminal outcome.

    A response without ``requestId`` is a synchronous completion, unless the
    endpoint always answers asynchronously (``require_tracking_id``).
    """
    activity_id = response.get("requestId") if isinstance(response, dict) else None
    if not activity_id:
        if require_tracking_id:
            raise ProtocolError(f"missing tracking id: no requestId returned for {label.entity.lower()} {label.action}")
        return PollOutcome(status="completed", message=label.synchronous())

    return await poll_activity(
        fetch,
        str(activity_id),
        policy=policy,
        label=label,
        max_attempts=max_attempts,
        poll_interval_ms=poll_interval_ms,
        sleep=sleep,
    )
