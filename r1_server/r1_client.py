from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .activity import ActivityRecord
from .errors import ApiError, AuthenticationError


logger = logging.getLogger("r1_server.r1_client")

DEFAULT_TOKEN_TTL_S = 300


@dataclass(frozen=True)
class TokenResponse:
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = DEFAULT_TOKEN_TTL_S


def _json_or_none(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


class R1Client:
    """HTTP access to RUCKUS One.

    Holds no credentials; every call takes the bearer token explicitly so the
    token lifecycle stays with ``TokenService``.
    """

    def __init__(self, http: httpx.AsyncClient, region: str = ""):
        self.http = http
        self.region = (region or "").strip()

    @property
    def api_base(self) -> str:
        if self.region:
            return f"https://api.{self.region}.ruckus.cloud"
        return "https://api.ruckus.cloud"

    def token_url(self, tenant_id: str) -> str:
        prefix = f"{self.region}." if self.region else ""
        return f"https://{prefix}ruckus.cloud/oauth2/token/{tenant_id}"

    async def fetch_token(self, tenant_id: str, client_id: str, client_secret: str) -> TokenResponse:
        """Exchange client credentials for a bearer token. No retry."""
        data = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        }
        try:
            resp = await self.http.post(
                self.token_url(tenant_id),
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Authentication failed: token request error: {e}") from e

        payload = _json_or_none(resp)
        if not resp.is_success:
            err = payload.get("error") if isinstance(payload, dict) else None
            desc = payload.get("error_description") if isinstance(payload, dict) else None
            msg = f"Authentication failed with status {resp.status_code}"
            if err:
                msg += f" - {err}"
            if desc:
                msg += f": {desc}"
            raise AuthenticationError(
                msg,
                http_status=resp.status_code,
                error=err,
                error_description=desc,
            )

        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise AuthenticationError("Authentication failed: token response has no access_token")

        return TokenResponse(
            access_token=payload["access_token"],
            token_type=payload.get("token_type") or "Bearer",
            expires_in=int(payload.get("expires_in") or DEFAULT_TOKEN_TTL_S),
        )

    async def request(
        self,
        token: str,
        method: str,
        path: str,
        *,
        operation: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Authenticated API call; returns the decoded body ({} when empty)."""
        url = f"{self.api_base}{path}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        resp = await self.http.request(method, url, json=json, params=params, headers=headers)
        body = _json_or_none(resp)
        if not resp.is_success:
            raise ApiError(operation, resp.status_code, body)
        return {} if body is None else body

    async def get_activity(self, token: str, activity_id: str) -> ActivityRecord:
        body = await self.request(
            token, "GET", f"/activities/{activity_id}", operation="Get activity details"
        )
        if not isinstance(body, dict):
            body = {}
        return ActivityRecord.model_validate(body)
