"""Redis implementation of CacheStore.

Entries are stored as JSON strings under ``<namespace>:data:<reference_id>``;
optional sidecar metadata lives under ``<namespace>:metadata:<reference_id>``.
Expiration is enforced lazily: an entry read after its ``expires_at`` is
deleted on the spot and reported as absent.
"""

import json
from typing import Any

import redis
import structlog
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from reference_cache.config import get_redis_client, settings
from reference_cache.entities import CacheEntry
from reference_cache.errors import BackendUnavailableError
from reference_cache.protocols import KeyValueBackend

logger = structlog.get_logger(__name__)

INFO_FIELDS = {
    "redis_version": "redis_version",
    "used_memory": "used_memory_human",
    "connected_clients": "connected_clients",
    "total_commands_processed": "total_commands_processed",
    "keyspace_hits": "keyspace_hits",
    "keyspace_misses": "keyspace_misses",
}


def _decode(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisCacheRepository:
    """Redis implementation of the reference-ID cache store.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Every public method catches backend, encoding and serialization
    errors, logs them and answers with a neutral value instead of raising.
    """

    def __init__(
        self,
        redis_client: KeyValueBackend | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Redis client (or any KeyValueBackend). If None, creates default.
            namespace: Key namespace. If None, uses settings.
        """
        self._client = redis_client or get_redis_client()
        self._namespace = namespace or settings.cache_namespace
        self._data_prefix = f"{self._namespace}:data:"
        self._metadata_prefix = f"{self._namespace}:metadata:"

    @classmethod
    def create(
        cls,
        redis_client: KeyValueBackend | None = None,
        namespace: str | None = None,
        verify: bool = False,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            redis_client: Backend client. If None, built from settings.
            namespace: Key namespace. If None, uses settings.
            verify: Ping the backend and fail fast if it is unreachable.

        Returns:
            Configured RedisCacheRepository

        Raises:
            BackendUnavailableError: If ``verify`` is set and the ping fails
        """
        repository = cls(redis_client=redis_client, namespace=namespace)
        if verify and not repository.health_check():
            raise BackendUnavailableError(settings.redis_url, "ping failed")
        return repository

    def data_key(self, reference_id: str) -> str:
        return f"{self._data_prefix}{reference_id}"

    def metadata_key(self, reference_id: str) -> str:
        return f"{self._metadata_prefix}{reference_id}"

    def put(self, reference_id: str, entry: CacheEntry) -> bool:
        """Serialize and store an entry.

        Args:
            reference_id: The reference ID to store under
            entry: The entry; a positive ``ttl_seconds`` sets a backend expiration

        Returns:
            True if stored, False on serialization or backend failure
        """
        try:
            payload = entry.to_json()
        except (PydanticSerializationError, TypeError, ValueError) as e:
            logger.error("entry serialization failed", reference_id=reference_id, error=str(e))
            return False

        ttl = entry.ttl_seconds if entry.ttl_seconds and entry.ttl_seconds > 0 else None
        try:
            self._client.set(self.data_key(reference_id), payload, ex=ttl)
        except redis.RedisError as e:
            logger.error("entry store failed", reference_id=reference_id, error=str(e))
            return False

        logger.info("entry stored", reference_id=reference_id, ttl=ttl)
        return True

    def get(self, reference_id: str) -> CacheEntry | None:
        """Retrieve an entry, deleting it if it turns out to be expired.

        Args:
            reference_id: The reference ID to look up

        Returns:
            The entry, or None if absent, undecodable or expired
        """
        try:
            raw = self._client.get(self.data_key(reference_id))
        except (redis.RedisError, UnicodeDecodeError) as e:
            logger.error("entry read failed", reference_id=reference_id, error=str(e))
            return None

        if raw is None:
            logger.debug("entry not found", reference_id=reference_id)
            return None

        try:
            entry = CacheEntry.from_json(raw)
        except ValidationError as e:
            logger.error(
                "entry deserialization failed",
                reference_id=reference_id,
                error_count=e.error_count(),
            )
            return None
        except (ValueError, OverflowError) as e:
            logger.error("entry deserialization failed", reference_id=reference_id, error=str(e))
            return None

        if entry.is_expired():
            logger.info("entry expired, removing", reference_id=reference_id)
            self.delete(reference_id)
            return None

        return entry

    def delete(self, reference_id: str) -> bool:
        """Delete an entry.

        Args:
            reference_id: The reference ID to delete

        Returns:
            True if a key existed and was removed
        """
        try:
            deleted: int = self._client.delete(self.data_key(reference_id))  # type: ignore[assignment]
        except redis.RedisError as e:
            logger.error("entry delete failed", reference_id=reference_id, error=str(e))
            return False

        logger.info("entry deleted", reference_id=reference_id, deleted=deleted > 0)
        return deleted > 0

    def exists(self, reference_id: str) -> bool:
        """Check key existence without decoding or expiration checks."""
        try:
            return self._client.exists(self.data_key(reference_id)) > 0
        except redis.RedisError as e:
            logger.error("existence check failed", reference_id=reference_id, error=str(e))
            return False

    def set_ttl(self, reference_id: str, seconds: int) -> bool:
        """Set the backend expiration of an entry.

        Returns:
            True if the key exists and the timeout was set
        """
        try:
            result = bool(self._client.expire(self.data_key(reference_id), seconds))
        except redis.RedisError as e:
            logger.error("ttl update failed", reference_id=reference_id, error=str(e))
            return False

        logger.info("ttl updated", reference_id=reference_id, ttl=seconds, success=result)
        return result

    def get_ttl(self, reference_id: str) -> int:
        """Get the backend expiration in seconds.

        Returns:
            Remaining seconds, or -1 if absent or without expiration
        """
        try:
            ttl = self._client.ttl(self.data_key(reference_id))
        except redis.RedisError as e:
            logger.error("ttl read failed", reference_id=reference_id, error=str(e))
            return -1

        if ttl is None or ttl < 0:
            return -1
        return int(ttl)

    def keys(self, pattern: str) -> list[str]:
        """List backend keys matching a glob pattern, empty on failure."""
        try:
            return [_decode(key) for key in self._client.scan_iter(match=pattern)]
        except (redis.RedisError, UnicodeDecodeError) as e:
            logger.error("key scan failed", pattern=pattern, error=str(e))
            return []

    def find_by_pattern(self, pattern: str) -> dict[str, CacheEntry]:
        """Retrieve every live entry whose key matches a glob pattern.

        Each matched key goes through ``get``, so lazy expiration applies
        per key. Keys outside the data namespace are skipped.

        Args:
            pattern: Glob-style backend key pattern

        Returns:
            Mapping of reference ID to entry; expired or undecodable entries omitted
        """
        result: dict[str, CacheEntry] = {}
        for key in self.keys(pattern):
            if not key.startswith(self._data_prefix):
                continue
            reference_id = key[len(self._data_prefix):]
            entry = self.get(reference_id)
            if entry is not None:
                result[reference_id] = entry

        logger.debug("pattern scan finished", pattern=pattern, matched=len(result))
        return result

    def clear_all(self) -> bool:
        """Delete every key in this store's namespace.

        Returns:
            True if nothing matched or at least one key was deleted
        """
        keys = self.keys(f"{self._namespace}:*")
        if not keys:
            logger.info("no cache keys to clear", namespace=self._namespace)
            return True

        try:
            deleted: int = self._client.delete(*keys)  # type: ignore[assignment]
        except redis.RedisError as e:
            logger.error("cache clear failed", namespace=self._namespace, error=str(e))
            return False

        logger.info("cache cleared", namespace=self._namespace, deleted=deleted)
        return deleted > 0

    def put_with_metadata(
        self,
        reference_id: str,
        entry: CacheEntry,
        metadata: dict[str, Any] | None,
    ) -> bool:
        """Store an entry plus a sidecar metadata mapping.

        The sidecar gets the entry's TTL at write time and is not kept in
        sync afterwards.

        Returns:
            True if the entry itself was stored
        """
        if not self.put(reference_id, entry):
            return False

        if metadata:
            ttl = entry.ttl_seconds if entry.ttl_seconds and entry.ttl_seconds > 0 else None
            try:
                self._client.set(self.metadata_key(reference_id), json.dumps(metadata), ex=ttl)
            except (TypeError, ValueError) as e:
                logger.error("metadata serialization failed", reference_id=reference_id, error=str(e))
            except redis.RedisError as e:
                logger.error("metadata store failed", reference_id=reference_id, error=str(e))

        return True

    def get_metadata(self, reference_id: str) -> dict[str, Any] | None:
        """Retrieve the sidecar metadata of an entry, if any."""
        try:
            raw = self._client.get(self.metadata_key(reference_id))
        except (redis.RedisError, UnicodeDecodeError) as e:
            logger.error("metadata read failed", reference_id=reference_id, error=str(e))
            return None

        if raw is None:
            return None

        try:
            metadata = json.loads(raw)
        except ValueError:
            logger.error("metadata deserialization failed", reference_id=reference_id)
            return None

        if not isinstance(metadata, dict):
            logger.error("metadata is not a mapping", reference_id=reference_id)
            return None
        return metadata

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def stats(self) -> dict[str, Any]:
        """Get repository statistics.

        Server fields and the key count are collected independently, so a
        failure in one still returns the other.

        Returns:
            Dictionary with stats
        """
        stats: dict[str, Any] = {"namespace": self._namespace}

        try:
            info = self._client.info()
        except redis.RedisError as e:
            logger.error("server info unavailable", error=str(e))
            stats["error"] = "Failed to retrieve server statistics"
        else:
            for name, field in INFO_FIELDS.items():
                stats[name] = info.get(field)

        stats["application_keys_count"] = len(self.keys(f"{self._namespace}:*"))
        return stats

    @property
    def namespace(self) -> str:
        """Get the key namespace."""
        return self._namespace

    @property
    def data_key_pattern(self) -> str:
        """Glob pattern matching every entry key in this namespace."""
        return f"{self._data_prefix}*"

    @property
    def client(self) -> KeyValueBackend:
        """Get the Redis client."""
        return self._client
