"""Tests for token acquisition, caching and invalidation."""
import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from r1_server.errors import AuthenticationError
from conftest import CLIENT, SECRET, TENANT


def test_token_is_fetched_once_and_cached(fake, session):
    first = asyncio.run(session.tokens.get_valid_token())
    second = asyncio.run(session.tokens.get_valid_token())

    assert first == second == "tok-1"
    assert len(fake.token_requests) == 1


def test_token_request_is_form_encoded_client_credentials(fake, session):
    asyncio.run(session.tokens.get_valid_token())

    request = fake.token_requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"https://ruckus.cloud/oauth2/token/{TENANT}"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    form = parse_qs(request.content.decode())
    assert form == {
        "grant_type": ["client_credentials"],
        "client_id": [CLIENT],
        "client_secret": [SECRET],
    }


def test_regional_token_url(fake, make_session):
    session = make_session(region="eu")
    asyncio.run(session.tokens.get_valid_token())
    assert str(fake.token_requests[0].url) == f"https://eu.ruckus.cloud/oauth2/token/{TENANT}"


def test_invalidate_forces_new_exchange(fake, session):
    asyncio.run(session.tokens.get_valid_token())
    session.tokens.invalidate()
    token = asyncio.run(session.tokens.get_valid_token())

    assert token == "tok-2"
    assert len(fake.token_requests) == 2


def test_rejected_exchange_raises_and_leaves_cache_empty(fake, session):
    fake.token_response = (401, {"error": "invalid_client", "error_description": "Bad secret"})

    with pytest.raises(AuthenticationError) as exc_info:
        asyncio.run(session.tokens.get_valid_token())

    err = exc_info.value
    assert err.http_status == 401
    assert err.error == "invalid_client"
    assert err.error_description == "Bad secret"
    assert "invalid_client" in str(err)
    assert session.tokens.stats()["count"] == 0


def test_transport_failure_is_authentication_error(fake, session):
    fake.token_response = httpx.ConnectError("connection refused")

    with pytest.raises(AuthenticationError, match="connection refused"):
        asyncio.run(session.tokens.get_valid_token())


def test_response_without_access_token_is_rejected(fake, session):
    fake.token_response = {"token_type": "Bearer"}

    with pytest.raises(AuthenticationError, match="access_token"):
        asyncio.run(session.tokens.get_valid_token())


def test_failed_exchange_is_not_retried(fake, session):
    fake.token_response = (500, {"error": "server_error"})

    with pytest.raises(AuthenticationError):
        asyncio.run(session.tokens.get_valid_token())
    assert len(fake.token_requests) == 1
