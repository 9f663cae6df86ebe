"""Tests for error classification."""
import httpx
import pytest

from r1_server.errors import (
    ApiError,
    AuthenticationError,
    ErrorCategory,
    NotFoundError,
    ProtocolError,
    classify_error,
)


@pytest.mark.parametrize(
    "exc,category",
    [
        (AuthenticationError("Authentication failed with status 401"), ErrorCategory.AUTH),
        (ApiError("Get venue", 401), ErrorCategory.AUTH),
        (ApiError("Get venue", 403), ErrorCategory.AUTH),
        (ApiError("Get venue", 404), ErrorCategory.NOT_FOUND),
        (ApiError("Query venues", 429), ErrorCategory.RATE_LIMIT),
        (ApiError("Query venues", 504), ErrorCategory.TIMEOUT),
        (ApiError("Create venue", 400, {"message": "not found in request"}), ErrorCategory.INTERNAL),
        (NotFoundError("Venue", "x", []), ErrorCategory.NOT_FOUND),
        (ProtocolError("missing tracking id"), ErrorCategory.INTERNAL),
        (httpx.ReadTimeout("read timed out"), ErrorCategory.TIMEOUT),
        (httpx.ConnectError("refused"), ErrorCategory.TIMEOUT),
    ],
)
def test_structured_classification(exc, category):
    assert classify_error(exc) is category


@pytest.mark.parametrize(
    "message,category",
    [
        ("Unauthorized", ErrorCategory.AUTH),
        ("resource Not Found", ErrorCategory.NOT_FOUND),
        ("socket timed out", ErrorCategory.TIMEOUT),
        ("Too Many Requests", ErrorCategory.RATE_LIMIT),
        ("something else", ErrorCategory.INTERNAL),
    ],
)
def test_foreign_exceptions_use_message_heuristic(message, category):
    assert classify_error(RuntimeError(message)) is category


def test_rpc_codes():
    assert ErrorCategory.AUTH.rpc_code == -32600
    assert ErrorCategory.NOT_FOUND.rpc_code == -32600
    assert ErrorCategory.TIMEOUT.rpc_code == -32603
    assert ErrorCategory.RATE_LIMIT.rpc_code == -32603
    assert ErrorCategory.INTERNAL.rpc_code == -32603


def test_not_found_with_empty_listing():
    err = NotFoundError("Venue", "HQ", [])
    assert str(err) == 'Venue "HQ" not found. Available venue names: (none)'
