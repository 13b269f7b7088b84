from typing import Any

from fastapi import APIRouter, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reference_cache.api.dependencies import HandlerDep, lifespan
from reference_cache.config import settings
from reference_cache.dto import (
    CreateEntityRequest,
    CustomReferenceIdRequest,
    HealthCheckResponse,
    StoreCustomRequest,
    UpdateEntityRequest,
)

app = FastAPI(
    title="Reference Cache API",
    description="Reference-ID keyed, TTL-governed cache backed by Redis",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

router = APIRouter(prefix="/cache", tags=["cache"])


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Reference Cache API",
        "version": "0.1.0",
        "description": "Reference-ID keyed, TTL-governed cache backed by Redis",
        "endpoints": {
            "cache": "/cache",
            "stats": "/cache/stats",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> JSONResponse:
    """Health check endpoint."""
    result = await handler.health_check()
    status_code = 200 if result["cache_healthy"] else 503
    return JSONResponse(status_code=status_code, content=result)


# Reference IDs


@router.get("/generate-reference-id")
async def generate_reference_id(handler: HandlerDep, prefix: str | None = None) -> JSONResponse:
    """Generate a reference ID with an optional prefix."""
    return await handler.generate_reference_id(prefix)


@router.get("/generate-reference-id/{type_name}")
async def generate_reference_id_by_type(type_name: str, handler: HandlerDep) -> JSONResponse:
    """Generate a reference ID for a named type (azure, gcp, splunk, user, ...)."""
    return await handler.generate_reference_id_by_type(type_name)


@router.post("/generate-custom-reference-id")
async def generate_custom_reference_id(
    request: CustomReferenceIdRequest, handler: HandlerDep
) -> JSONResponse:
    """Generate a reference ID from selected segments."""
    return await handler.generate_custom_reference_id(request)


@router.get("/validate-reference-id/{reference_id}")
async def validate_reference_id(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.validate_reference_id(reference_id)


@router.get("/extract-prefix/{reference_id}")
async def extract_prefix(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.extract_prefix(reference_id)


@router.get("/generator-stats")
async def generator_stats(handler: HandlerDep) -> JSONResponse:
    return await handler.generator_stats()


# Data entities


@router.post("/data-entity")
async def create_entity(request: CreateEntityRequest, handler: HandlerDep) -> JSONResponse:
    """Create a data entity."""
    return await handler.create_entity(request)


@router.get("/data-entity/{reference_id}")
async def get_entity(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.get_entity(reference_id)


@router.put("/data-entity/{reference_id}")
async def update_entity(
    reference_id: str, request: UpdateEntityRequest, handler: HandlerDep
) -> JSONResponse:
    """Update the non-blank fields of a data entity."""
    return await handler.update_entity(reference_id, request)


@router.delete("/data-entity/{reference_id}")
async def delete_entity(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.delete_entity(reference_id)


@router.get("/data-entities")
async def list_entities(handler: HandlerDep, pattern: str | None = None) -> JSONResponse:
    """List data entities, optionally restricted to a key pattern."""
    return await handler.list_entities(pattern)


@router.post("/bulk-create")
async def bulk_create(requests: list[CreateEntityRequest], handler: HandlerDep) -> JSONResponse:
    """Create several data entities; blank names are skipped."""
    return await handler.bulk_create(requests)


# Custom payloads


@router.post("/store")
async def store_custom(request: StoreCustomRequest, handler: HandlerDep) -> JSONResponse:
    """Store an arbitrary payload under a new reference ID."""
    return await handler.store_custom(request)


@router.get("/retrieve/{reference_id}")
async def retrieve_custom(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.retrieve_custom(reference_id)


@router.get("/metadata/{reference_id}")
async def retrieve_metadata(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.retrieve_metadata(reference_id)


# Cache management


@router.get("/stats")
async def get_stats(handler: HandlerDep) -> JSONResponse:
    """Get cache and generator statistics."""
    return await handler.get_stats()


@router.delete("/clear")
async def clear_cache(handler: HandlerDep) -> JSONResponse:
    """Clear every entry in the cache namespace."""
    return await handler.clear_cache()


@router.delete("/delete/{reference_id}")
async def delete_entry(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.delete_entry(reference_id)


@router.get("/exists/{reference_id}")
async def exists(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.exists(reference_id)


@router.get("/ttl/{reference_id}")
async def get_ttl(reference_id: str, handler: HandlerDep) -> JSONResponse:
    return await handler.get_ttl(reference_id)


@router.put("/ttl/{reference_id}")
async def set_ttl(
    reference_id: str,
    handler: HandlerDep,
    ttl_seconds: int = Query(..., alias="ttlSeconds"),
) -> JSONResponse:
    return await handler.set_ttl(reference_id, ttl_seconds)


@router.post("/async-process/{reference_id}")
async def process_async(
    reference_id: str,
    handler: HandlerDep,
    operation: str = Query(...),
) -> JSONResponse:
    """Start background processing; answers before the work is done."""
    return await handler.process_async(reference_id, operation)


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "reference_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
