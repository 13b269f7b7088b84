"""Domain entities for internal representation.

These models are used by services and repositories. They are NOT the API
contract - use DTOs from the dto package for that.

Entities should have:
- Their own (de)serialization to the persisted wire format
- No knowledge of Redis or HTTP
- Pure domain logic only
"""

from .cache_entry import DATA_ENTITY, DEFAULT_TTL_SECONDS, MAX_TTL_SECONDS, CacheEntry
from .data_entity import DEFAULT_STATUS, DataEntity
from .generator_stats import GeneratorStats

__all__ = [
    "CacheEntry",
    "DataEntity",
    "GeneratorStats",
    "DATA_ENTITY",
    "DEFAULT_STATUS",
    "DEFAULT_TTL_SECONDS",
    "MAX_TTL_SECONDS",
]
