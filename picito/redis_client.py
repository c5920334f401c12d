import redis
import structlog

from picito.config import settings

log = structlog.get_logger()

redis_client = redis.Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_connect_timeout=1,
    socket_timeout=1,
)

def redis_ping() -> bool:
    try:
        return bool(redis_client.ping())
    except redis.RedisError as e:
        log.warning("redis.unreachable", error=e.__class__.__name__)
        return False
