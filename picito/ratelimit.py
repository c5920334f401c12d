from __future__ import annotations

import hashlib

import redis
import structlog
from fastapi import Request

from picito.config import settings
from picito.errors import TooManyRequests
from picito.redis_client import redis_client

log = structlog.get_logger()

def _hash(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:24]

# fixed-window limiter using redis INCR + EXPIRE
def rate_limit(name: str, limit_per_window: int, window_seconds: int):
    def _dep(request: Request) -> None:
        if not settings.rate_limit_enabled:
            return

        ip = (request.client.host if request.client else "unknown").strip()
        key = f"rl:{name}:{_hash(ip)}"

        try:
            pipe = redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            count, _ = pipe.execute()
        except redis.RedisError as e:
            # fail-open if redis is down
            log.warning("ratelimit.unavailable", limiter=name, error=str(e))
            return

        if int(count) > int(limit_per_window):
            raise TooManyRequests("Too many requests, slow down")

    return _dep
