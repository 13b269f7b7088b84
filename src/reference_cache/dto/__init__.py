"""Data Transfer Objects for API contracts.

These Pydantic models define the external contract: the uniform
``ApiResponse`` envelope returned by the service layer and the request
bodies accepted by the HTTP layer.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    CreateEntityRequest,
    CustomReferenceIdRequest,
    StoreCustomRequest,
    UpdateEntityRequest,
)
from .responses import ApiResponse, HealthCheckResponse

__all__ = [
    "ApiResponse",
    "HealthCheckResponse",
    "CreateEntityRequest",
    "UpdateEntityRequest",
    "StoreCustomRequest",
    "CustomReferenceIdRequest",
]
