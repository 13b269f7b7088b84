"""Data service for entity CRUD and custom payload storage.

This service orchestrates cache operations by coordinating the cache
store (persistence) and the reference ID generator (key minting). Every
public method returns an ``ApiResponse`` envelope and never raises.
"""

import time
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict
from typing import Any

import structlog

from reference_cache.config import settings
from reference_cache.dto import ApiResponse
from reference_cache.entities import (
    DATA_ENTITY,
    DEFAULT_STATUS,
    MAX_TTL_SECONDS,
    CacheEntry,
    DataEntity,
)
from reference_cache.errors import ErrorKind
from reference_cache.protocols import CacheStore

from .reference_id_generator import ReferenceIdGenerator

logger = structlog.get_logger(__name__)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class DataService:
    """Core orchestration service.

    This service depends on the CacheStore PROTOCOL, not a concrete
    implementation, so the backend can be Redis, Valkey or an in-memory
    double in tests.

    There is no cross-key atomicity: ``update_entity`` is a read-modify-write
    and concurrent writers on one reference ID resolve as last-write-wins.

    Example:
        ```python
        from reference_cache.repositories import RedisCacheRepository
        from reference_cache.services import DataService, ReferenceIdGenerator

        service = DataService.create(
            cache_store=RedisCacheRepository.create(),
            id_generator=ReferenceIdGenerator(),
        )
        result = service.create_entity("Invoice batch", "Q3 uploads", "finance")
        if result.success:
            print(result.reference_id)
        ```
    """

    def __init__(
        self,
        cache_store: CacheStore,
        id_generator: ReferenceIdGenerator,
        executor: ThreadPoolExecutor | None = None,
        processing_delay: float | None = None,
        default_ttl: int | None = None,
    ) -> None:
        """Initialize the data service.

        Args:
            cache_store: Cache storage backend (required).
            id_generator: Reference ID generator (required).
            executor: Worker pool for async processing. One is created if None.
            processing_delay: Seconds each async processing task waits. Defaults to settings.
            default_ttl: TTL for entries created without one. Defaults to settings.
        """
        self._store = cache_store
        self._ids = id_generator
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.async_max_workers,
            thread_name_prefix="data-processing",
        )
        self._processing_delay = (
            settings.async_processing_delay if processing_delay is None else processing_delay
        )
        self._default_ttl = default_ttl or settings.cache_default_ttl

    @classmethod
    def create(
        cls,
        cache_store: CacheStore,
        id_generator: ReferenceIdGenerator | None = None,
        processing_delay: float | None = None,
        default_ttl: int | None = None,
    ) -> "DataService":
        """Factory method to create DataService with sensible defaults.

        Args:
            cache_store: Cache storage backend (required).
            id_generator: Reference ID generator. A fresh one if None.
            processing_delay: Async processing delay in seconds. If None, uses settings.
            default_ttl: Default entry TTL in seconds. If None, uses settings.

        Returns:
            Configured DataService instance
        """
        return cls(
            cache_store=cache_store,
            id_generator=id_generator or ReferenceIdGenerator(),
            processing_delay=processing_delay,
            default_ttl=default_ttl,
        )

    def create_entity(
        self,
        name: str | None,
        description: str | None = None,
        category: str | None = None,
    ) -> ApiResponse:
        """Create a data entity under a freshly generated reference ID.

        Args:
            name: Entity name (required, non-blank)
            description: Optional description
            category: Optional category

        Returns:
            Envelope carrying the DataEntity and its reference ID
        """
        if _is_blank(name):
            return ApiResponse.fail("Name is required", ErrorKind.VALIDATION)

        try:
            reference_id = self._ids.generate()
            entity = DataEntity(
                reference_id=reference_id,
                name=name,
                description=description,
                category=category,
                status=DEFAULT_STATUS,
            )
            entry = CacheEntry(
                reference_id=reference_id,
                data_type=DATA_ENTITY,
                content=entity,
                metadata="Created via DataService",
                ttl_seconds=self._default_ttl,
            )

            if not self._store.put(reference_id, entry):
                logger.error("data entity store failed", reference_id=reference_id)
                return ApiResponse.fail("Failed to store data entity", ErrorKind.BACKEND)

            logger.info("data entity created", reference_id=reference_id)
            return ApiResponse.ok("Data entity created successfully", entity, reference_id)

        except Exception as e:
            logger.exception("data entity creation failed")
            return ApiResponse.fail(f"Error creating data entity: {e}")

    def get_entity(self, reference_id: str) -> ApiResponse:
        """Retrieve a data entity.

        Returns:
            Envelope carrying the DataEntity; NOT_FOUND if absent or expired,
            TYPE_MISMATCH if the entry holds something else
        """
        try:
            entry = self._store.get(reference_id)
            if entry is None:
                logger.warning("data entity not found", reference_id=reference_id)
                return ApiResponse.fail(
                    f"Data entity not found for reference ID: {reference_id}",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )

            if not isinstance(entry.content, DataEntity):
                logger.warning(
                    "entry is not a data entity",
                    reference_id=reference_id,
                    data_type=entry.data_type,
                )
                return ApiResponse.fail(
                    f"Invalid data type for reference ID: {reference_id}",
                    ErrorKind.TYPE_MISMATCH,
                    reference_id=reference_id,
                )

            return ApiResponse.ok("Data entity retrieved successfully", entry.content, reference_id)

        except Exception as e:
            logger.exception("data entity retrieval failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error retrieving data entity: {e}")

    def update_entity(
        self,
        reference_id: str,
        name: str | None = None,
        description: str | None = None,
        category: str | None = None,
        status: str | None = None,
    ) -> ApiResponse:
        """Update the non-blank fields of a data entity and rewrite its entry.

        Returns:
            Envelope carrying the updated DataEntity
        """
        try:
            entry = self._store.get(reference_id)
            if entry is None:
                return ApiResponse.fail(
                    f"Data entity not found for reference ID: {reference_id}",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )

            entity = entry.content
            if not isinstance(entity, DataEntity):
                return ApiResponse.fail(
                    f"Invalid data type for reference ID: {reference_id}",
                    ErrorKind.TYPE_MISMATCH,
                    reference_id=reference_id,
                )

            changes = {
                "name": name,
                "description": description,
                "category": category,
                "status": status,
            }
            for field_name, value in changes.items():
                if not _is_blank(value):
                    setattr(entity, field_name, value)
            entity.touch()

            entry.content = entity
            entry.metadata = "Updated via DataService"

            if not self._store.put(reference_id, entry):
                logger.error("data entity update failed", reference_id=reference_id)
                return ApiResponse.fail("Failed to update data entity", ErrorKind.BACKEND)

            logger.info("data entity updated", reference_id=reference_id)
            return ApiResponse.ok("Data entity updated successfully", entity, reference_id)

        except Exception as e:
            logger.exception("data entity update failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error updating data entity: {e}")

    def delete_entity(self, reference_id: str) -> ApiResponse:
        """Delete a data entity.

        Returns:
            Envelope carrying the reference ID; NOT_FOUND if nothing was deleted
        """
        try:
            if not self._store.delete(reference_id):
                logger.warning("data entity delete found nothing", reference_id=reference_id)
                return ApiResponse.fail(
                    "Failed to delete data entity or entity not found",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )

            logger.info("data entity deleted", reference_id=reference_id)
            return ApiResponse.ok("Data entity deleted successfully", reference_id, reference_id)

        except Exception as e:
            logger.exception("data entity delete failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error deleting data entity: {e}")

    def store_custom(
        self,
        prefix: str | None,
        payload: Any,
        data_type: str = "CUSTOM",
        ttl_seconds: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Store an arbitrary payload under a new reference ID.

        Args:
            prefix: Reference ID prefix (default prefix if blank)
            payload: JSON-serializable payload (required)
            data_type: Tag describing the payload
            ttl_seconds: Lifetime in seconds. Default TTL if None.
            metadata: Optional sidecar metadata stored next to the entry

        Returns:
            Envelope carrying the new reference ID
        """
        if payload is None:
            return ApiResponse.fail("Data is required", ErrorKind.VALIDATION)
        if ttl_seconds is not None and ttl_seconds > MAX_TTL_SECONDS:
            return ApiResponse.fail(
                f"TTL must not exceed {MAX_TTL_SECONDS} seconds", ErrorKind.VALIDATION
            )

        try:
            reference_id = self._ids.generate(prefix)
            entry = CacheEntry(
                reference_id=reference_id,
                data_type=data_type or "CUSTOM",
                content=payload,
                metadata="Stored via DataService.store_custom",
                ttl_seconds=self._default_ttl if ttl_seconds is None else ttl_seconds,
            )

            if metadata:
                stored = self._store.put_with_metadata(reference_id, entry, metadata)
            else:
                stored = self._store.put(reference_id, entry)

            if not stored:
                logger.error("custom data store failed", reference_id=reference_id)
                return ApiResponse.fail("Failed to store custom data", ErrorKind.BACKEND)

            logger.info("custom data stored", reference_id=reference_id, data_type=entry.data_type)
            return ApiResponse.ok("Custom data stored successfully", reference_id, reference_id)

        except Exception as e:
            logger.exception("custom data store failed")
            return ApiResponse.fail(f"Error storing custom data: {e}")

    def get_custom(self, reference_id: str) -> ApiResponse:
        """Retrieve the payload stored under a reference ID, whatever its type."""
        try:
            entry = self._store.get(reference_id)
            if entry is None:
                logger.warning("custom data not found", reference_id=reference_id)
                return ApiResponse.fail(
                    f"Custom data not found for reference ID: {reference_id}",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )

            return ApiResponse.ok("Custom data retrieved successfully", entry.content, reference_id)

        except Exception as e:
            logger.exception("custom data retrieval failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error retrieving custom data: {e}")

    def get_custom_metadata(self, reference_id: str) -> ApiResponse:
        """Retrieve the sidecar metadata stored with a custom payload."""
        try:
            metadata = self._store.get_metadata(reference_id)
            if metadata is None:
                return ApiResponse.fail(
                    f"Metadata not found for reference ID: {reference_id}",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )

            return ApiResponse.ok("Metadata retrieved successfully", metadata, reference_id)

        except Exception as e:
            logger.exception("metadata retrieval failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error retrieving metadata: {e}")

    def list_entities(self, pattern: str | None = None) -> ApiResponse:
        """List the data entities whose keys match a pattern.

        Args:
            pattern: Backend key glob. Defaults to every entry in the namespace.

        Returns:
            Envelope carrying the list of DataEntity; other payloads are skipped
        """
        try:
            search_pattern = pattern or self._store.data_key_pattern
            entries = self._store.find_by_pattern(search_pattern)
            entities = [
                entry.content for entry in entries.values() if isinstance(entry.content, DataEntity)
            ]

            logger.info("data entities listed", pattern=search_pattern, count=len(entities))
            return ApiResponse.ok("Data entities retrieved successfully", entities)

        except Exception as e:
            logger.exception("data entity listing failed")
            return ApiResponse.fail(f"Error retrieving data entities: {e}")

    def bulk_create(self, entities: Iterable[Mapping[str, Any]]) -> ApiResponse:
        """Create several data entities independently.

        Inputs with a blank name are skipped and individual failures are
        dropped, so the result lists only the IDs that were created.

        Args:
            entities: Mappings with ``name``, ``description`` and ``category``

        Returns:
            Envelope carrying the list of created reference IDs
        """
        try:
            reference_ids: list[str] = []
            for item in entities:
                name = item.get("name")
                if _is_blank(name):
                    continue

                result = self.create_entity(name, item.get("description"), item.get("category"))
                if result.success and result.reference_id:
                    reference_ids.append(result.reference_id)

            logger.info("bulk creation finished", created=len(reference_ids))
            return ApiResponse.ok("Bulk creation completed", reference_ids)

        except Exception as e:
            logger.exception("bulk creation failed")
            return ApiResponse.fail(f"Error in bulk creation: {e}")

    def process_async(self, reference_id: str, operation: str) -> "Future[ApiResponse]":
        """Process an entry on the worker pool.

        The task waits the processing delay, re-reads the entry, records the
        operation in its ``metadata`` and writes it back. It cannot be
        cancelled once running.

        Returns:
            Future resolving to the outcome envelope
        """
        return self._executor.submit(self._process, reference_id, operation)

    def submit_processing(self, reference_id: str, operation: str) -> ApiResponse:
        """Start async processing and acknowledge immediately.

        The outcome is not reported back to the caller; it is only visible
        in the entry's ``metadata`` once the task has run.
        """
        try:
            self.process_async(reference_id, operation)
            return ApiResponse.ok(
                f"Async processing started for reference ID: {reference_id}",
                reference_id,
                reference_id,
            )
        except RuntimeError as e:
            # executor already shut down
            logger.error("async processing rejected", reference_id=reference_id, error=str(e))
            return ApiResponse.fail(f"Error starting async processing: {e}")

    def _process(self, reference_id: str, operation: str) -> ApiResponse:
        try:
            if self._processing_delay:
                time.sleep(self._processing_delay)

            entry = self._store.get(reference_id)
            if entry is None:
                logger.warning("async processing target gone", reference_id=reference_id)
                return ApiResponse.fail(
                    f"Data not found for reference ID: {reference_id}",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )

            entry.metadata = f"Processed with operation: {operation}"
            if not self._store.put(reference_id, entry):
                return ApiResponse.fail("Failed to store processed data", ErrorKind.BACKEND)

            logger.info("async processing completed", reference_id=reference_id, operation=operation)
            return ApiResponse.ok("Async processing completed", reference_id, reference_id)

        except Exception as e:
            logger.exception("async processing failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error in async processing: {e}")

    def exists(self, reference_id: str) -> ApiResponse:
        """Check whether an entry key exists in the backend."""
        try:
            return ApiResponse.ok("Cache existence checked", self._store.exists(reference_id), reference_id)
        except Exception as e:
            logger.exception("existence check failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error checking cache existence: {e}")

    def get_ttl(self, reference_id: str) -> ApiResponse:
        """Get the backend TTL of an entry (-1 if absent or not expiring)."""
        try:
            return ApiResponse.ok("Cache TTL retrieved", self._store.get_ttl(reference_id), reference_id)
        except Exception as e:
            logger.exception("ttl read failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error getting cache TTL: {e}")

    def set_ttl(self, reference_id: str, ttl_seconds: int) -> ApiResponse:
        """Set the backend TTL of an entry."""
        if ttl_seconds <= 0:
            return ApiResponse.fail("TTL must be a positive number of seconds", ErrorKind.VALIDATION)
        if ttl_seconds > MAX_TTL_SECONDS:
            return ApiResponse.fail(
                f"TTL must not exceed {MAX_TTL_SECONDS} seconds", ErrorKind.VALIDATION
            )

        try:
            if not self._store.set_ttl(reference_id, ttl_seconds):
                return ApiResponse.fail(
                    f"Failed to set cache TTL for reference ID: {reference_id}",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )
            return ApiResponse.ok("Cache TTL set successfully", reference_id, reference_id)

        except Exception as e:
            logger.exception("ttl update failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error setting cache TTL: {e}")

    def delete_entry(self, reference_id: str) -> ApiResponse:
        """Delete any cache entry, entity or not."""
        try:
            if not self._store.delete(reference_id):
                return ApiResponse.fail(
                    f"Cache entry not found for reference ID: {reference_id}",
                    ErrorKind.NOT_FOUND,
                    reference_id=reference_id,
                )
            return ApiResponse.ok("Cache entry deleted successfully", reference_id, reference_id)

        except Exception as e:
            logger.exception("cache entry delete failed", reference_id=reference_id)
            return ApiResponse.fail(f"Error deleting cache entry: {e}")

    def stats(self) -> ApiResponse:
        """Get cache statistics plus a reference ID generator snapshot."""
        try:
            stats = self._store.stats()
            stats["default_ttl"] = self._default_ttl
            stats["reference_ids"] = asdict(self._ids.stats())
            return ApiResponse.ok("Cache statistics retrieved successfully", stats)

        except Exception as e:
            logger.exception("cache statistics failed")
            return ApiResponse.fail(f"Error retrieving cache statistics: {e}")

    def clear_all(self) -> ApiResponse:
        """Clear every entry in the store's namespace."""
        try:
            if not self._store.clear_all():
                logger.warning("cache clear failed")
                return ApiResponse.fail("Failed to clear cache data", ErrorKind.BACKEND)

            logger.info("cache cleared")
            return ApiResponse.ok("All cache data cleared successfully")

        except Exception as e:
            logger.exception("cache clear failed")
            return ApiResponse.fail(f"Error clearing cache data: {e}")

    def is_healthy(self) -> bool:
        """Check if the cache backend is reachable."""
        return self._store.health_check()

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the worker pool if this service created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    @property
    def cache_store(self) -> CacheStore:
        """Get the underlying cache store (for testing)."""
        return self._store

    @property
    def id_generator(self) -> ReferenceIdGenerator:
        """Get the underlying reference ID generator."""
        return self._ids
