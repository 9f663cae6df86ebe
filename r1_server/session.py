from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from .activity import ActivityRecord, OperationLabel, PollOutcome, StatusPolicy, track_operation
from .config import AppConfig
from .errors import ApiError
from .r1_client import R1Client
from .token_service import TokenService


logger = logging.getLogger("r1_server.session")


class R1Session:
    """Everything a tool handler needs to talk to RUCKUS One.

    Built once per application and passed explicitly; there is no module-level
    client or token state.
    """

    def __init__(
        self,
        cfg: AppConfig,
        client: R1Client,
        tokens: TokenService,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.cfg = cfg
        self.client = client
        self.tokens = tokens
        self._sleep = sleep

    @property
    def region(self) -> str:
        return self.client.region

    async def call(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        token = await self.tokens.get_valid_token()
        try:
            return await self.client.request(token, method, path, operation=operation, json=json, params=params)
        except ApiError as e:
            if e.http_status == 401:
                # Rejected bearer token: force a fresh exchange on the next call.
                self.tokens.invalidate()
            raise

    async def fetch_activity(self, activity_id: str) -> ActivityRecord:
        token = await self.tokens.get_valid_token()
        return await self.client.get_activity(token, activity_id)

    async def track(
        self,
        response: Any,
        *,
        policy: StatusPolicy,
        label: OperationLabel,
        require_tracking_id: bool = False,
        max_retries: Optional[int] = None,
        poll_interval_ms: Optional[int] = None,
    ) -> PollOutcome:
        polling = self.cfg.polling
        return await track_operation(
            response,
            self.fetch_activity,
            policy=policy,
            label=label,
            require_tracking_id=require_tracking_id,
            max_attempts=polling.max_retries if max_retries is None else max_retries,
            poll_interval_ms=polling.poll_interval_ms if poll_interval_ms is None else poll_interval_ms,
            sleep=self._sleep,
        )
