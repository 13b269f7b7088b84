"""Cache storage protocol.

Defines the interface for any store that keeps ``CacheEntry`` values under
reference IDs with per-entry expiration.

Implementations can include:
- Redis (default)
- Valkey / KeyDB / any Redis-protocol server
- An in-process dictionary for tests

None of these operations raise: failures come back as False, None, -1 or
an empty mapping, and are logged by the implementation.
"""

from typing import Any, Protocol, runtime_checkable

from reference_cache.entities import CacheEntry


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for reference-ID keyed cache stores.

    Example:
        ```python
        from reference_cache.protocols import CacheStore

        store: CacheStore = RedisCacheRepository.create()
        ```
    """

    @property
    def namespace(self) -> str:
        """The key namespace owned by this store."""
        ...

    @property
    def data_key_pattern(self) -> str:
        """Glob pattern matching every entry key in this namespace."""
        ...

    def put(self, reference_id: str, entry: CacheEntry) -> bool:
        """Serialize and store an entry.

        Args:
            reference_id: The reference ID to store under
            entry: The entry; a positive ``ttl_seconds`` sets a backend expiration

        Returns:
            True if stored, False on serialization or backend failure
        """
        ...

    def get(self, reference_id: str) -> CacheEntry | None:
        """Retrieve an entry, deleting it if it turns out to be expired.

        Args:
            reference_id: The reference ID to look up

        Returns:
            The entry, or None if absent, undecodable or expired
        """
        ...

    def delete(self, reference_id: str) -> bool:
        """Delete an entry.

        Returns:
            True if a key existed and was removed
        """
        ...

    def exists(self, reference_id: str) -> bool:
        """Check key existence without decoding or expiration checks."""
        ...

    def set_ttl(self, reference_id: str, seconds: int) -> bool:
        """Set the backend expiration of an entry.

        Returns:
            True if the key exists and the timeout was set
        """
        ...

    def get_ttl(self, reference_id: str) -> int:
        """Get the backend expiration in seconds.

        Returns:
            Remaining seconds, or -1 if absent or without expiration
        """
        ...

    def find_by_pattern(self, pattern: str) -> dict[str, CacheEntry]:
        """Retrieve every live entry whose key matches a glob pattern.

        Args:
            pattern: Glob-style backend key pattern

        Returns:
            Mapping of reference ID to entry; expired or undecodable entries omitted
        """
        ...

    def clear_all(self) -> bool:
        """Delete every key in this store's namespace.

        Returns:
            True if nothing matched or at least one key was deleted
        """
        ...

    def put_with_metadata(
        self,
        reference_id: str,
        entry: CacheEntry,
        metadata: dict[str, Any] | None,
    ) -> bool:
        """Store an entry plus a sidecar metadata mapping with the same TTL.

        Returns:
            True if the entry itself was stored
        """
        ...

    def get_metadata(self, reference_id: str) -> dict[str, Any] | None:
        """Retrieve the sidecar metadata of an entry, if any."""
        ...

    def health_check(self) -> bool:
        """Check if the backend is accessible."""
        ...

    def stats(self) -> dict[str, Any]:
        """Get best-effort backend statistics.

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
