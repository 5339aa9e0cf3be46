"""
Redis Key-Value Adapter - Redis-backed TTL storage for sessions and indexes.
"""

from typing import Optional, Union

import redis
from redis.exceptions import WatchError

from carelink_auth.config import RedisSettings
from carelink_auth.ports.kv_port import KeyValuePort


def _decode(value: Union[str, bytes, None]) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisKeyValueAdapter(KeyValuePort):
    """
    Redis-backed key-value storage.

    Values are stored as strings with a Redis TTL, so expiry needs no sweeper.
    compare_and_set uses WATCH/MULTI optimistic locking.
    """

    def __init__(self, redis_client=None, settings: Optional[RedisSettings] = None):
        """
        Initialize Redis adapter.

        Args:
            redis_client: Redis client instance (redis.Redis); created lazily if None
            settings: Connection settings used for the lazy client
        """
        self._redis = redis_client
        self._settings = settings or RedisSettings()

    @classmethod
    def from_secret_map(cls, secret: dict, db_name: str = "sessions_db") -> "RedisKeyValueAdapter":
        """Build from a decoded Redis connection secret."""
        return cls(settings=RedisSettings.from_secret_map(secret, db_name=db_name))

    def _get_redis(self):
        """Lazy load Redis client."""
        if self._redis is None:
            self._redis = redis.Redis(
                host=self._settings.host,
                port=self._settings.port,
                db=self._settings.db,
                password=self._settings.password,
                decode_responses=True,
            )
        return self._redis

    def get(self, key: str) -> Optional[str]:
        return _decode(self._get_redis().get(key))

    def set(self, key: str, value: str, ttl: int, nx: bool = False, xx: bool = False) -> bool:
        result = self._get_redis().set(key, value, ex=ttl, nx=nx, xx=xx)
        return bool(result)

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self._get_redis().delete(*keys))

    def exists(self, key: str) -> bool:
        return self._get_redis().exists(key) == 1

    def ttl(self, key: str) -> Optional[int]:
        remaining = self._get_redis().ttl(key)
        # -2: no such key, -1: no expiry
        if remaining is None or remaining < 0:
            return None
        return int(remaining)

    def compare_and_set(
        self,
        key: str,
        expected: Optional[str],
        value: Optional[str],
        ttl: int,
    ) -> bool:
        with self._get_redis().pipeline() as pipe:
            try:
                pipe.watch(key)
                current = _decode(pipe.get(key))
                if current != expected:
                    pipe.unwatch()
                    return False

                pipe.multi()
                if value is None:
                    pipe.delete(key)
                else:
                    pipe.set(key, value, ex=ttl)
                pipe.execute()
                return True
            except WatchError:
                return False
