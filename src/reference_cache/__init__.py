"""Reference Cache - reference-ID keyed, TTL-governed caching on Redis.

This package provides a layered architecture for caching application data
under generated reference IDs:

Layers:
    - protocols: Interface contracts (CacheStore, KeyValueBackend)
    - repositories: Data access implementations
    - services: Business logic (DataService, ReferenceIdGenerator)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts, ApiResponse envelope)
    - entities: Domain models (CacheEntry, DataEntity)

Usage:
    ```python
    from reference_cache.repositories import RedisCacheRepository
    from reference_cache.services import DataService

    service = DataService.create(cache_store=RedisCacheRepository.create())
    result = service.store_custom("AZR", {"blob": "uploads/a.csv"}, "AZURE_UPLOAD")
    ```

For HTTP API:
    ```python
    from reference_cache.api.app import app
    ```
"""

from reference_cache.config import get_redis_client, settings
from reference_cache.dto import ApiResponse
from reference_cache.entities import CacheEntry, DataEntity, GeneratorStats
from reference_cache.errors import BackendUnavailableError, ErrorKind
from reference_cache.handlers import CacheHandler
from reference_cache.protocols import CacheStore, KeyValueBackend
from reference_cache.repositories import RedisCacheRepository
from reference_cache.services import DataService, IdPrefix, ReferenceIdGenerator

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "KeyValueBackend",
    # Services (business logic)
    "DataService",
    "ReferenceIdGenerator",
    "IdPrefix",
    # Handlers (HTTP)
    "CacheHandler",
    # Repositories (data access)
    "RedisCacheRepository",
    # Entities (domain models)
    "CacheEntry",
    "DataEntity",
    "GeneratorStats",
    # DTOs (API contracts)
    "ApiResponse",
    # Errors
    "ErrorKind",
    "BackendUnavailableError",
]
