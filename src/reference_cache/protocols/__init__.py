"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → Valkey, in-memory, etc.)
- Unit testing with fake backends
- Clear separation of concerns

Usage:
    ```python
    from reference_cache.protocols import CacheStore, KeyValueBackend

    # Type hints work with any implementation
    backend: KeyValueBackend = redis.Redis()        # works
    store: CacheStore = RedisCacheRepository()      # works
    ```
"""

from .cache_store import CacheStore
from .key_value_backend import KeyValueBackend

__all__ = [
    "CacheStore",
    "KeyValueBackend",
]
