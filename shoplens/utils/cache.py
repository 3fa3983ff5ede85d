import hashlib
import json
import logging
from typing import Any, Optional
from redis.asyncio import Redis

logger = logging.getLogger(__name__)


def cache_key(prefix: str, params: dict) -> str:
    """Stable key: prefix + md5 of the sorted JSON params."""
    digest = hashlib.md5(json.dumps(params, sort_keys=True, default=str).encode()).hexdigest()
    return f"{prefix}:{digest}"


async def cache_get(redis: Optional[Redis], key: str) -> Any:
    """Cached JSON value, or None on miss, without Redis, or on any Redis error."""
    if redis is None:
        return None
    try:
        if val := await redis.get(key):
            return json.loads(val)
    except Exception as e:
        logger.warning("cache get error key=%s err=%s", key, e)
    return None


async def cache_set(redis: Optional[Redis], key: str, value, ex: int = 60) -> None:
    if redis is None:
        return
    try:
        await redis.set(key, json.dumps(value, default=str), ex=ex)
    except Exception as e:
        logger.warning("cache set error key=%s err=%s", key, e)
