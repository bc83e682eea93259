"""
Legacy session store backed by Redis.

Sessions are JSON user projections (``id``, ``role``, ``email``,
``tenant_id``) stored under ``<prefix><session token>`` with a TTL.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from adminportal.identity.application.ports import SessionStoreError
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


class RedisSessionStore:
    def __init__(self, client: Redis, *, key_prefix: str = "portal:session:") -> None:
        self._redis = client
        self._prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, *, key_prefix: str = "portal:session:") -> RedisSessionStore:
        # from_url is sync; the pool connects lazily
        client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5.0,
            socket_timeout=5.0,
            health_check_interval=30,
        )
        return cls(client, key_prefix=key_prefix)

    def _key(self, session_token: str) -> str:
        return f"{self._prefix}{session_token}"

    async def get(self, session_token: str) -> Optional[Dict[str, Any]]:
        try:
            raw = await self._redis.get(self._key(session_token))
        except RedisError as exc:
            raise SessionStoreError(str(exc)) from exc
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("legacy_session_payload_unreadable")
            return None
        return data if isinstance(data, dict) else None

    async def close(self) -> None:
        await self._redis.aclose()
