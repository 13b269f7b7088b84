"""Repository layer for data access.

This layer abstracts the key-value backend behind the protocol-based
CacheStore interface. This enables:
- Easy swapping of implementations (Redis → Valkey, in-memory, etc.)
- Unit testing with fake backends
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from reference_cache.protocols import CacheStore, KeyValueBackend

from .redis_repository import RedisCacheRepository

__all__ = [
    "CacheStore",
    "KeyValueBackend",
    "RedisCacheRepository",
]
