from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional


logger = logging.getLogger("r1_server.token_cache")

# Cached tokens are treated as expired this long before their real expiry.
EXPIRY_BUFFER_S = 60.0


@dataclass(frozen=True)
class CachedToken:
    token: str
    expires_at: float
    token_type: str = "Bearer"


class TokenCache:
    """Thread-safe in-memory bearer token cache keyed by (tenant, client).

    Expiry is checked lazily on read; there is no background eviction.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._lock = threading.Lock()
        self._clock = clock
        self._tokens: Dict[str, CachedToken] = {}

    @staticmethod
    def _key(tenant_id: str, client_id: str) -> str:
        return f"{tenant_id}:{client_id}"

    def get(self, tenant_id: str, client_id: str) -> Optional[CachedToken]:
        key = self._key(tenant_id, client_id)
        with self._lock:
            cached = self._tokens.get(key)
            if cached is None:
                return None
            if self._clock() >= cached.expires_at - EXPIRY_BUFFER_S:
                del self._tokens[key]
                logger.debug("token_cache_expired", extra={"key": key})
                return None
            return cached

    def put(
        self,
        tenant_id: str,
        client_id: str,
        token: str,
        token_type: str = "Bearer",
        ttl_seconds: float = 0,
    ) -> CachedToken:
        cached = CachedToken(
            token=token,
            expires_at=self._clock() + ttl_seconds,
            token_type=token_type,
        )
        with self._lock:
            self._tokens[self._key(tenant_id, client_id)] = cached
        return cached

    def invalidate(self, tenant_id: str, client_id: str) -> None:
        with self._lock:
            self._tokens.pop(self._key(tenant_id, client_id), None)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()

    def stats(self) -> Dict[str, object]:
        with self._lock:
            keys: List[str] = list(self._tokens.keys())
        return {"count": len(keys), "keys": keys}
