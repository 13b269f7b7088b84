"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from reference_cache.services import DataService, ReferenceIdGenerator

    # Using factory method (recommended)
    service = DataService.create(cache_store=RedisCacheRepository.create())

    # Or manual creation
    service = DataService(cache_store=repo, id_generator=ReferenceIdGenerator())
    ```
"""

from .data_service import DataService
from .reference_id_generator import AtomicCounter, IdPrefix, ReferenceIdGenerator

__all__ = [
    "AtomicCounter",
    "DataService",
    "IdPrefix",
    "ReferenceIdGenerator",
]
