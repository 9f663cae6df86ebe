"""Tests for activity evaluation and the polling loop."""
import asyncio
import itertools

import pytest

from r1_server.activity import (
    ActivityRecord,
    OperationLabel,
    StatusPolicy,
    Verdict,
    evaluate,
    poll_activity,
    track_operation,
)
from r1_server.errors import ProtocolError


VENUE_CREATE = OperationLabel("Venue", "create")


class ScriptedFetch:
    """Returns the scripted records in order; exceptions in the script are raised."""

    def __init__(self, *script):
        self.script = list(script)
        self.calls = 0

    async def __call__(self, activity_id):
        item = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return ActivityRecord.model_validate(item)


def _poll(fetch, policy, sleeps, **kwargs):
    kwargs.setdefault("max_attempts", 5)
    kwargs.setdefault("poll_interval_ms", 2000)
    kwargs.setdefault("label", VENUE_CREATE)
    return asyncio.run(poll_activity(fetch, "req-1", policy=policy, sleep=sleeps, **kwargs))


# =============================================================================
# evaluate
# =============================================================================

@pytest.mark.parametrize(
    "record,expected",
    [
        ({"status": "INPROGRESS"}, Verdict.IN_PROGRESS),
        ({"status": "SUCCESS"}, Verdict.IN_PROGRESS),
        ({"status": "SUCCESS", "endDatetime": "t"}, Verdict.SUCCESS),
        ({"status": "INPROGRESS", "endDatetime": "t"}, Verdict.FAILURE),
        ({"status": "ERROR", "endDatetime": "t"}, Verdict.FAILURE),
        ({"status": "FAIL"}, Verdict.FAILURE),
        ({"status": "SUCCESS", "endDatetime": None}, Verdict.IN_PROGRESS),
    ],
)
def test_evaluate_end_datetime_gated(record, expected):
    assert evaluate(StatusPolicy.END_DATETIME_GATED, ActivityRecord.model_validate(record)) is expected


@pytest.mark.parametrize(
    "status,expected",
    [
        ("COMPLETED", Verdict.SUCCESS),
        ("FAILED", Verdict.FAILURE),
        ("PENDING", Verdict.IN_PROGRESS),
        ("INPROGRESS", Verdict.IN_PROGRESS),
        (None, Verdict.IN_PROGRESS),
    ],
)
def test_evaluate_status_gated(status, expected):
    assert evaluate(StatusPolicy.STATUS_GATED, ActivityRecord(status=status)) is expected


# =============================================================================
# poll_activity
# =============================================================================

def test_end_datetime_gated_completes_after_three_fetches(sleeps):
    fetch = ScriptedFetch(
        {"status": "INPROGRESS"},
        {"status": "INPROGRESS"},
        {"status": "SUCCESS", "endDatetime": "t"},
    )
    outcome = _poll(fetch, StatusPolicy.END_DATETIME_GATED, sleeps)

    assert outcome.status == "completed"
    assert outcome.message == "Venue created successfully"
    assert outcome.activity_id == "req-1"
    assert outcome.record.end_datetime == "t"
    assert fetch.calls == 3
    assert sleeps.delays == [2.0, 2.0]


def test_status_gated_pending_times_out_after_max_attempts(sleeps):
    fetch = ScriptedFetch(*[{"status": "PENDING"}] * 5)
    outcome = _poll(fetch, StatusPolicy.STATUS_GATED, sleeps, label=OperationLabel("Role", "create"))

    assert outcome.status == "timeout"
    assert outcome.message == "Role creation status unknown - polling timeout"
    assert outcome.record.status == "PENDING"
    assert fetch.calls == 5
    # No sleep after the last attempt.
    assert len(sleeps.delays) == 4


def test_end_datetime_gated_failure_stops_immediately(sleeps):
    fetch = ScriptedFetch({"status": "ERROR", "endDatetime": "t"}, {"status": "SUCCESS", "endDatetime": "t"})
    outcome = _poll(fetch, StatusPolicy.END_DATETIME_GATED, sleeps)

    assert outcome.status == "failed"
    assert outcome.message == "Venue creation failed"
    assert outcome.error == "Operation completed with non-SUCCESS status"
    assert fetch.calls == 1
    assert sleeps.delays == []


def test_failure_reports_backend_error_text(sleeps):
    fetch = ScriptedFetch({"status": "FAILED", "error": "Role name in use"})
    outcome = _poll(fetch, StatusPolicy.STATUS_GATED, sleeps, label=OperationLabel("Role", "create"))

    assert outcome.status == "failed"
    assert outcome.error == "Role name in use"


def test_status_gated_failure_without_details_is_unknown_error(sleeps):
    fetch = ScriptedFetch({"status": "FAILED"})
    outcome = _poll(fetch, StatusPolicy.STATUS_GATED, sleeps, label=OperationLabel("Role", "delete"))

    assert outcome.error == "Unknown error"
    assert outcome.message == "Role deletion failed"


def test_numeric_end_datetime_completes(sleeps):
    fetch = ScriptedFetch({"status": "SUCCESS", "endDatetime": 1714557600000})
    outcome = _poll(fetch, StatusPolicy.END_DATETIME_GATED, sleeps)

    assert outcome.status == "completed"
    assert outcome.to_dict()["activityDetails"]["endDatetime"] == 1714557600000
    assert fetch.calls == 1


def test_structured_failure_message_is_stringified(sleeps):
    fetch = ScriptedFetch({"status": "FAILED", "message": {"code": "X"}})
    outcome = _poll(fetch, StatusPolicy.STATUS_GATED, sleeps, label=OperationLabel("Role", "create"))

    assert outcome.status == "failed"
    assert outcome.error == str({"code": "X"})
    assert outcome.to_dict()["activityDetails"]["message"] == {"code": "X"}


def test_fetch_errors_are_absorbed_until_last_attempt(sleeps):
    fetch = ScriptedFetch(RuntimeError("503 from gateway"), {"status": "COMPLETED"})
    outcome = _poll(fetch, StatusPolicy.STATUS_GATED, sleeps, label=OperationLabel("Role", "update"))

    assert outcome.status == "completed"
    assert outcome.message == "Role updated successfully"
    assert fetch.calls == 2


def test_fetch_error_on_last_attempt_is_reported_as_timeout(sleeps):
    fetch = ScriptedFetch({"status": "INPROGRESS"}, RuntimeError("connection reset"))
    outcome = _poll(fetch, StatusPolicy.END_DATETIME_GATED, sleeps, max_attempts=2)

    assert outcome.status == "timeout"
    assert outcome.error == "Failed to get activity status after maximum retries: connection reset"
    assert outcome.record.status == "INPROGRESS"
    assert fetch.calls == 2


@pytest.mark.parametrize("policy", list(StatusPolicy))
@pytest.mark.parametrize("max_attempts", [1, 3, 7])
def test_poller_never_exceeds_max_attempts(policy, max_attempts, sleeps):
    statuses = itertools.cycle(["INPROGRESS", "PENDING", "SUCCESS", "QUEUED"])
    script = []
    for _ in range(max_attempts + 3):
        status = next(statuses)
        script.append({"status": status} if status != "SUCCESS" else {"status": "INPROGRESS"})
    script.insert(1, RuntimeError("flaky"))
    fetch = ScriptedFetch(*script)

    outcome = _poll(fetch, policy, sleeps, max_attempts=max_attempts, poll_interval_ms=0)

    assert fetch.calls <= max_attempts
    assert outcome.status in ("completed", "failed", "timeout")
    assert len(sleeps.delays) <= max_attempts - 1


def test_to_dict_shape(sleeps):
    fetch = ScriptedFetch({"status": "ERROR", "endDatetime": "t", "message": "quota exceeded"})
    outcome = _poll(fetch, StatusPolicy.END_DATETIME_GATED, sleeps)

    assert outcome.to_dict() == {
        "status": "failed",
        "message": "Venue creation failed",
        "activityId": "req-1",
        "activityDetails": {"status": "ERROR", "endDatetime": "t", "message": "quota exceeded"},
        "error": "quota exceeded",
    }


# =============================================================================
# track_operation
# =============================================================================

def test_response_without_request_id_is_synchronous_success(sleeps):
    fetch = ScriptedFetch({"status": "INPROGRESS"})
    outcome = asyncio.run(
        track_operation(
            {"id": "grp-1"},
            fetch,
            policy=StatusPolicy.END_DATETIME_GATED,
            label=OperationLabel("AP group", "create"),
            sleep=sleeps,
        )
    )

    assert outcome.status == "completed"
    assert outcome.message == "AP group created successfully (synchronous operation)"
    assert fetch.calls == 0


def test_missing_request_id_is_protocol_error_when_required(sleeps):
    fetch = ScriptedFetch({"status": "INPROGRESS"})
    with pytest.raises(ProtocolError, match="missing tracking id"):
        asyncio.run(
            track_operation(
                {},
                fetch,
                policy=StatusPolicy.END_DATETIME_GATED,
                label=VENUE_CREATE,
                require_tracking_id=True,
                sleep=sleeps,
            )
        )
    assert fetch.calls == 0


def test_request_id_starts_polling(sleeps):
    fetch = ScriptedFetch({"status": "SUCCESS", "endDatetime": "t"})
    outcome = asyncio.run(
        track_operation(
            {"requestId": "req-9", "response": {"id": "v1"}},
            fetch,
            policy=StatusPolicy.END_DATETIME_GATED,
            label=VENUE_CREATE,
            max_attempts=3,
            poll_interval_ms=10,
            sleep=sleeps,
        )
    )

    assert outcome.ok
    assert outcome.activity_id == "req-9"
    assert fetch.calls == 1
