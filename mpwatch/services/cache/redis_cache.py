from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from redis import asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheGetResult:
    hit: bool
    value: Any | None


class RedisCache:
    """
    JSON cache for backend reads. Fail-soft: a redis error is a miss on
    read and a no-op on write, the site keeps serving from the backend.
    """

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @staticmethod
    def connect(url: str) -> aioredis.Redis:
        # decode_responses = False -> bytes
        # encoding is managed explicitly
        return aioredis.Redis.from_url(url, decode_responses=False)

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.warning("redis ping failed: %s", e)
            return False

    async def get_json(self, key: str) -> CacheGetResult:
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            logger.warning("cache get failed key=%s error=%s", key, e)
            return CacheGetResult(hit=False, value=None)

        if raw is None:
            return CacheGetResult(hit=False, value=None)

        try:
            return CacheGetResult(hit=True, value=json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return CacheGetResult(hit=False, value=None)

    async def set_json(self, key: str, value: Any, ttl: int) -> None:
        payload = json.dumps(value, ensure_ascii=False).encode("utf-8")
        try:
            await self.client.set(key, payload, ex=ttl)
        except RedisError as e:
            logger.warning("cache set failed key=%s error=%s", key, e)

    async def close(self) -> None:
        await self.client.aclose()
