"""Data entity domain model."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from reference_cache.utils import format_datetime, now

DEFAULT_STATUS = "ACTIVE"


class DataEntity(BaseModel):
    """A named record stored inside a ``CacheEntry`` tagged ``DATA_ENTITY``.

    The entity has no persistence of its own: it lives and dies with the
    cache entry that wraps it.

    Attributes:
        reference_id: Identifier of the wrapping cache entry
        name: Display name (required, non-blank)
        description: Optional free text
        category: Optional grouping label
        status: Lifecycle status, ``ACTIVE`` unless changed
        metadata: Optional free-text annotation
        created_at: When the entity was created
        updated_at: When the entity was last updated
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reference_id: str
    name: str
    description: str | None = None
    category: str | None = None
    status: str = DEFAULT_STATUS
    metadata: str | None = None
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

    @field_serializer("created_at", "updated_at")
    def _serialize_datetime(self, value: datetime) -> str | None:
        return format_datetime(value)

    def touch(self) -> None:
        """Stamp ``updated_at`` with the current time."""
        self.updated_at = now()
