"""Request DTOs for API endpoints.

Fields are accepted in camelCase or snake_case. Required-field checks are
left to the service layer so that a missing name comes back as a regular
validation envelope rather than a framework error.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateEntityRequest(_CamelModel):
    """Request DTO for creating a data entity."""

    name: str | None = Field(None, description="Entity name (required, non-blank)")
    description: str | None = Field(None, description="Optional description")
    category: str | None = Field(None, description="Optional category")


class UpdateEntityRequest(_CamelModel):
    """Request DTO for updating a data entity. Blank fields are left unchanged."""

    name: str | None = None
    description: str | None = None
    category: str | None = None
    status: str | None = None


class StoreCustomRequest(_CamelModel):
    """Request DTO for storing an arbitrary payload."""

    prefix: str | None = Field(None, description="Reference ID prefix (default prefix if blank)")
    data: Any = Field(None, description="The payload to store (required)")
    data_type: str = Field("CUSTOM", description="Tag describing the payload")
    ttl_seconds: int | None = Field(None, description="Lifetime in seconds (default TTL if null)")
    metadata: dict[str, Any] | None = Field(None, description="Optional sidecar metadata")


class CustomReferenceIdRequest(_CamelModel):
    """Request DTO for generating a reference ID from selected segments."""

    prefix: str | None = "CLD"
    include_timestamp: bool = True
    random_length: int = Field(6, ge=0, le=64)
    include_sequence: bool = True
