"""Shared fixtures: an in-memory RUCKUS One backend behind httpx.MockTransport."""
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from r1_server.config import AppConfig, EnvSettings
from r1_server.r1_client import R1Client
from r1_server.session import R1Session
from r1_server.token_cache import TokenCache
from r1_server.token_service import TokenService


TENANT = "tenant-1"
CLIENT = "client-1"
SECRET = "secret-1"

VENUE_A = "11111111-1111-1111-1111-111111111111"
VENUE_B = "22222222-2222-2222-2222-222222222222"
GROUP_ID = "33333333-3333-3333-3333-333333333333"


class FakeR1:
    """Scripted backend.

    Routes map (METHOD, path) to a list of responses consumed in order; the
    last response is repeated once the list runs out. A response is either a
    (status, body) tuple, a plain body (status 200), an exception instance to
    raise, or a callable taking the request.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.calls: List[Tuple[str, str, Any]] = []
        self.token_requests: List[httpx.Request] = []
        self.token_counter = 0
        self.token_response: Optional[Any] = None

    def on(self, method: str, path: str, *responses: Any) -> "FakeR1":
        self.routes[(method.upper(), path)] = list(responses)
        return self

    def calls_to(self, method: str, path: str) -> List[Any]:
        return [body for m, p, body in self.calls if m == method.upper() and p == path]

    def _token(self, request: httpx.Request) -> httpx.Response:
        self.token_requests.append(request)
        if self.token_response is not None:
            return self._respond(self.token_response, request)
        self.token_counter += 1
        return httpx.Response(
            200,
            json={"access_token": f"tok-{self.token_counter}", "token_type": "Bearer", "expires_in": 3600},
        )

    def _respond(self, reply: Any, request: httpx.Request) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(request)
        if isinstance(reply, httpx.Response):
            return reply
        if isinstance(reply, tuple):
            status, body = reply
        else:
            status, body = 200, reply
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/oauth2/token/"):
            return self._token(request)

        body = None
        if request.content:
            try:
                body = json.loads(request.content)
            except ValueError:
                body = request.content.decode()
        self.calls.append((request.method, path, body))

        queue = self.routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.method} {path}"})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        return self._respond(reply, request)


class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture()
def fake() -> FakeR1:
    return FakeR1()


@pytest.fixture()
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def make_session(fake, sleeps) -> Callable[..., R1Session]:
    def _make(cfg: Optional[AppConfig] = None, region: str = "") -> R1Session:
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
        client = R1Client(http, region=region)
        tokens = TokenService(TokenCache(), client, TENANT, CLIENT, SECRET)
        return R1Session(cfg or AppConfig(), client, tokens, sleep=sleeps)

    return _make


@pytest.fixture()
def session(make_session) -> R1Session:
    return make_session()


def make_env(**extra) -> EnvSettings:
    values = {
        "RUCKUS_TENANT_ID": TENANT,
        "RUCKUS_CLIENT_ID": CLIENT,
        "RUCKUS_CLIENT_SECRET": SECRET,
        "RUCKUS_REGION": "",
    }
    values.update(extra)
    return EnvSettings(**values)
