"""Key-value backend protocol.

Defines the slice of a Redis-style client the cache store relies on. The
``redis.Redis`` client satisfies it as-is; tests use an in-memory double.
"""

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueBackend(Protocol):
    """Protocol for the key-value client behind the cache store.

    Keys and values are strings (or bytes when the client does not decode
    responses). Per-key operations are expected to be atomic.
    """

    def get(self, name: str) -> Any:
        """Return the value stored at ``name`` or None."""
        ...

    def set(self, name: str, value: str, ex: int | None = None) -> Any:
        """Store ``value`` at ``name``, expiring after ``ex`` seconds if given."""
        ...

    def delete(self, *names: str) -> int:
        """Delete keys and return how many existed."""
        ...

    def exists(self, *names: str) -> int:
        """Return how many of the given keys exist."""
        ...

    def expire(self, name: str, time: int) -> bool:
        """Set a timeout in seconds on ``name``; False if the key is absent."""
        ...

    def ttl(self, name: str) -> int:
        """Remaining seconds; -1 without expiration, -2 if the key is absent."""
        ...

    def scan_iter(self, match: str | None = None, count: int | None = None) -> Iterator[Any]:
        """Iterate over keys matching a glob-style pattern."""
        ...

    def info(self, section: str | None = None) -> dict[str, Any]:
        """Return server introspection fields."""
        ...

    def ping(self) -> Any:
        """Check connectivity."""
        ...
