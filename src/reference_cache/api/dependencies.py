"""Application wiring for the reference cache API.

The lifespan builds repository, generator, service and handler once and
parks them on ``app.state``; route dependencies read them back from the
request. Tests replace the objects on ``app.state`` directly.
"""

from contextlib import asynccontextmanager
from typing import Annotated

import structlog
from fastapi import Depends, FastAPI, Request

from reference_cache.config import settings
from reference_cache.handlers import CacheHandler
from reference_cache.logging_config import configure_logging
from reference_cache.repositories import RedisCacheRepository
from reference_cache.services import DataService, ReferenceIdGenerator

logger = structlog.get_logger(__name__)


def get_handler(request: Request) -> CacheHandler:
    """Dependency injection for CacheHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The CacheHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "cache_handler", None)
    if handler is None:
        raise RuntimeError("CacheHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service graph on startup and release it on shutdown.

    Startup order:
    1. Repository (data access) - fails fast if Redis is unreachable
    2. Service (business logic) - stored in app.state.data_service
    3. Handler (HTTP endpoints) - stored in app.state.cache_handler

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Shuts the processing pool down and removes services from app.state
    """
    configure_logging(settings.log_level, settings.log_json)

    repository = RedisCacheRepository.create(verify=True)
    id_generator = ReferenceIdGenerator()

    data_service = DataService.create(cache_store=repository, id_generator=id_generator)
    cache_handler = CacheHandler(data_service=data_service, id_generator=id_generator)

    app.state.data_service = data_service
    app.state.cache_handler = cache_handler
    app.state.id_generator = id_generator
    app.state.repository = repository

    logger.info(
        "reference cache started",
        redis_url=settings.redis_url,
        namespace=repository.namespace,
        default_ttl=settings.cache_default_ttl,
    )

    yield

    data_service.shutdown(wait=False)

    del app.state.cache_handler
    del app.state.data_service
    del app.state.id_generator
    del app.state.repository
    logger.info("reference cache shut down")


HandlerDep = Annotated[CacheHandler, Depends(get_handler)]
