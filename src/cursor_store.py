"""Resume-cursor storage for the category walker."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional, Protocol

import redis

from config import REDIS_URL

log = logging.getLogger("cursor_store")


class CursorStore(Protocol):
    """Key/value store with expiry, used only as a resume optimisation."""

    def get(self, key: str) -> Optional[str]: ...

    def put(self, key: str, value: str, ttl: timedelta) -> None: ...

    def delete(self, key: str) -> None: ...


class RedisCursorStore:
    """CursorStore backed by Redis.

    Redis errors are logged and swallowed: a cache outage degrades resume
    to a full run instead of blocking the import.
    """

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str = REDIS_URL) -> "RedisCursorStore":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            log.warning("Could not read cursor %s: %s", key, e)
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value or None

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        try:
            self.client.set(key, value, ex=int(ttl.total_seconds()))
        except redis.RedisError as e:
            log.warning("Could not save cursor %s=%s: %s", key, value, e)

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            log.warning("Could not clear cursor %s: %s", key, e)
