"""
Redis hot cache for generated study artifacts
"""
import redis
import json
import logging
from typing import Optional, Any

logger = logging.getLogger(__name__)


class ArtifactCache:
    """
    Redis-based read-through cache in front of the artifacts table

    The database row is the source of truth; every failure here is logged and
    treated as a miss.
    """

    def __init__(self, redis_client=None, ttl: int = 3600):
        self.redis_client = redis_client
        self.ttl = ttl

    @classmethod
    def from_url(cls, redis_url: Optional[str], ttl: int = 3600) -> "ArtifactCache":
        if not redis_url:
            logger.info("REDIS_URL not set. Artifact caching disabled.")
            return cls(None, ttl)

        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            client = None
        return cls(client, ttl)

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    @staticmethod
    def cache_key(resource_id: str, artifact_type: str) -> str:
        return f"artifact:{resource_id}:{artifact_type}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.info(f"Cache hit: {key}")
                return json.loads(value)
            logger.info(f"Cache miss: {key}")
            return None
        except Exception as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        """Store a JSON-serializable value with a TTL (default from settings)"""
        if not self.redis_client:
            return False

        try:
            ttl = ttl or self.ttl
            self.redis_client.setex(key, ttl, json.dumps(value))
            logger.info(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error: {str(e)}")
            return False
