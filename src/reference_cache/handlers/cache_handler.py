"""HTTP handlers for cache operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns only: every service envelope is returned as-is,
with the HTTP status taken from the envelope's ``status_code``.
"""

from dataclasses import asdict

from fastapi import status
from fastapi.responses import JSONResponse

from reference_cache.dto import (
    ApiResponse,
    CreateEntityRequest,
    CustomReferenceIdRequest,
    StoreCustomRequest,
    UpdateEntityRequest,
)
from reference_cache.services import DataService, ReferenceIdGenerator


def to_json_response(result: ApiResponse) -> JSONResponse:
    """Render an envelope with the HTTP status matching its outcome."""
    default = status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=result.status_code or default, content=result.to_content())


class CacheHandler:
    """HTTP handlers for cache operations.

    This handler delegates business logic to DataService and the
    ReferenceIdGenerator and handles HTTP-specific concerns like:
    - Converting request DTOs to service arguments
    - Setting status codes from envelopes

    Example:
        ```python
        handler = CacheHandler(data_service=service)

        @router.post("/data-entity")
        async def create_entity(request: CreateEntityRequest):
            return await handler.create_entity(request)
        ```
    """

    def __init__(
        self,
        data_service: DataService,
        id_generator: ReferenceIdGenerator | None = None,
    ) -> None:
        """Initialize the cache handler.

        Args:
            data_service: The data service for business logic (required).
            id_generator: Generator for the ID endpoints. Defaults to the service's own.
        """
        self._service = data_service
        self._ids = id_generator or data_service.id_generator

    # Reference IDs

    async def generate_reference_id(self, prefix: str | None) -> JSONResponse:
        reference_id = self._ids.generate(prefix)
        return to_json_response(
            ApiResponse.ok("Reference ID generated successfully", reference_id, reference_id)
        )

    async def generate_reference_id_by_type(self, type_name: str) -> JSONResponse:
        reference_id = self._ids.generate_for_type(type_name)
        return to_json_response(
            ApiResponse.ok("Reference ID generated successfully", reference_id, reference_id)
        )

    async def generate_custom_reference_id(self, request: CustomReferenceIdRequest) -> JSONResponse:
        reference_id = self._ids.generate_custom(
            request.prefix,
            include_timestamp=request.include_timestamp,
            random_length=request.random_length,
            include_sequence=request.include_sequence,
        )
        return to_json_response(
            ApiResponse.ok("Custom reference ID generated successfully", reference_id, reference_id)
        )

    async def validate_reference_id(self, reference_id: str) -> JSONResponse:
        valid = self._ids.is_valid(reference_id)
        return to_json_response(
            ApiResponse.ok("Reference ID validation completed", valid, reference_id)
        )

    async def extract_prefix(self, reference_id: str) -> JSONResponse:
        prefix = self._ids.extract_prefix(reference_id)
        return to_json_response(ApiResponse.ok("Prefix extracted", prefix, reference_id))

    async def generator_stats(self) -> JSONResponse:
        stats = asdict(self._ids.stats())
        return to_json_response(ApiResponse.ok("Generator statistics retrieved", stats))

    # Data entities

    async def create_entity(self, request: CreateEntityRequest) -> JSONResponse:
        return to_json_response(
            self._service.create_entity(request.name, request.description, request.category)
        )

    async def get_entity(self, reference_id: str) -> JSONResponse:
        return to_json_response(self._service.get_entity(reference_id))

    async def update_entity(self, reference_id: str, request: UpdateEntityRequest) -> JSONResponse:
        return to_json_response(
            self._service.update_entity(
                reference_id,
                name=request.name,
                description=request.description,
                category=request.category,
                status=request.status,
            )
        )

    async def delete_entity(self, reference_id: str) -> JSONResponse:
        return to_json_response(self._service.delete_entity(reference_id))

    async def list_entities(self, pattern: str | None) -> JSONResponse:
        return to_json_response(self._service.list_entities(pattern))

    async def bulk_create(self, requests: list[CreateEntityRequest]) -> JSONResponse:
        return to_json_response(self._service.bulk_create([r.model_dump() for r in requests]))

    # Custom payloads

    async def store_custom(self, request: StoreCustomRequest) -> JSONResponse:
        return to_json_response(
            self._service.store_custom(
                request.prefix,
                request.data,
                data_type=request.data_type,
                ttl_seconds=request.ttl_seconds,
                metadata=request.metadata,
            )
        )

    async def retrieve_custom(self, reference_id: str) -> JSONResponse:
        return to_json_response(self._service.get_custom(reference_id))

    async def retrieve_metadata(self, reference_id: str) -> JSONResponse:
        return to_json_response(self._service.get_custom_metadata(reference_id))

    # Cache management

    async def get_stats(self) -> JSONResponse:
        return to_json_response(self._service.stats())

    async def clear_cache(self) -> JSONResponse:
        return to_json_response(self._service.clear_all())

    async def delete_entry(self, reference_id: str) -> JSONResponse:
        return to_json_response(self._service.delete_entry(reference_id))

    async def exists(self, reference_id: str) -> JSONResponse:
        return to_json_response(self._service.exists(reference_id))

    async def get_ttl(self, reference_id: str) -> JSONResponse:
        return to_json_response(self._service.get_ttl(reference_id))

    async def set_ttl(self, reference_id: str, ttl_seconds: int) -> JSONResponse:
        return to_json_response(self._service.set_ttl(reference_id, ttl_seconds))

    async def process_async(self, reference_id: str, operation: str) -> JSONResponse:
        return to_json_response(self._service.submit_processing(reference_id, operation))

    async def health_check(self) -> dict:
        """Handle GET /health requests.

        Returns:
            Dict with health status
        """
        is_healthy = self._service.is_healthy()

        return {
            "status": "healthy" if is_healthy else "unhealthy",
            "cache_healthy": is_healthy,
        }
