from __future__ import annotations

import structlog
from redis import Redis

from contact_engagement.core.domain.ports.dedup_store import DedupStore

logger = structlog.get_logger(__name__)

CLAIM_VALUE = "1"


class RedisDedupStore(DedupStore):
    """
    Chaves de "já enviado hoje" no Redis.

    `claim` usa `SET key 1 NX EX ttl`: uma única operação atômica no
    servidor, então duas reivindicações concorrentes nunca vencem juntas.
    """

    def __init__(self, client: Redis, prefix: str = "") -> None:
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def claim(self, key: str, ttl_seconds: int) -> bool:
        created = self.client.set(self._key(key), CLAIM_VALUE, ex=max(1, int(ttl_seconds)), nx=True)
        logger.debug("dedup.claim", key=key, created=bool(created))
        return bool(created)

    def exists(self, key: str) -> bool:
        return bool(self.client.exists(self._key(key)))
