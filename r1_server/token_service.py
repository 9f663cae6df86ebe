from __future__ import annotations

import logging
from typing import Dict

from .r1_client import R1Client
from .token_cache import TokenCache


logger = logging.getLogger("r1_server.token_service")


class TokenService:
    """Serves a valid bearer token for one (tenant, client) pair.

    Cached tokens are reused until they enter the cache's expiry buffer. When
    an exchange fails the cached entry is dropped so a bad token is never
    served again without a fresh exchange. Concurrent refreshes may both hit
    the token endpoint; the last write wins.
    """

    def __init__(
        self,
        cache: TokenCache,
        client: R1Client,
        tenant_id: str,
        client_id: str,
        client_secret: str,
    ):
        self.cache = cache
        self.client = client
        self.tenant_id = tenant_id
        self.client_id = client_id
        self._client_secret = client_secret

    async def get_valid_token(self) -> str:
        cached = self.cache.get(self.tenant_id, self.client_id)
        if cached is not None:
            return cached.token

        try:
            resp = await self.client.fetch_token(self.tenant_id, self.client_id, self._client_secret)
        except Exception:
            self.invalidate()
            logger.error(
                "token_fetch_failed",
                extra={"tenant_id": self.tenant_id, "client_id": self.client_id, "region": self.client.region},
            )
            raise

        self.cache.put(
            self.tenant_id,
            self.client_id,
            resp.access_token,
            token_type=resp.token_type,
            ttl_seconds=resp.expires_in,
        )
        logger.info("token_refreshed", extra={"tenant_id": self.tenant_id, "expires_in": resp.expires_in})
        return resp.access_token

    def invalidate(self) -> None:
        self.cache.invalidate(self.tenant_id, self.client_id)

    def clear_all(self) -> None:
        self.cache.clear()

    def stats(self) -> Dict[str, object]:
        return self.cache.stats()
