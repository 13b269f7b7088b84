"""Cache entry domain entity."""

from datetime import datetime, timedelta
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from reference_cache.utils import format_datetime, now

from .data_entity import DataEntity

DATA_ENTITY = "DATA_ENTITY"
DEFAULT_TTL_SECONDS = 3600
# keeps expires_at inside the datetime range
MAX_TTL_SECONDS = 100 * 365 * 24 * 3600


class CacheEntry(BaseModel):
    """Envelope stored in the backend for every reference ID.

    ``content`` is decoded according to ``data_type``: entries tagged
    ``DATA_ENTITY`` whose content has the entity shape come back as a
    ``DataEntity``, everything else comes back as plain JSON values.

    Attributes:
        reference_id: The key this entry is stored under
        data_type: Free-form tag describing the payload
        content: The payload itself
        metadata: Optional free-text annotation
        ttl_seconds: Requested lifetime; ``None`` or non-positive means no expiration
        created_at: When the entry was built
        expires_at: ``created_at + ttl_seconds``, kept in sync with ``ttl_seconds``
    """

    reference_id: str
    data_type: str
    content: Any = None
    metadata: str | None = None
    ttl_seconds: int | None = DEFAULT_TTL_SECONDS
    created_at: datetime = Field(default_factory=now)
    expires_at: datetime | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: Any, info: ValidationInfo) -> Any:
        if info.data.get("data_type") != DATA_ENTITY or not isinstance(value, dict):
            return value
        try:
            return DataEntity.model_validate(value)
        except ValidationError:
            # left undecoded so readers can report the shape mismatch
            return value

    @model_validator(mode="after")
    def _fill_expires_at(self) -> "CacheEntry":
        if self.expires_at is None:
            self.expires_at = self._compute_expires_at()
        return self

    @field_serializer("created_at", "expires_at")
    def _serialize_datetime(self, value: datetime | None) -> str | None:
        return format_datetime(value)

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name == "ttl_seconds":
            super().__setattr__("expires_at", self._compute_expires_at())

    def _compute_expires_at(self) -> datetime | None:
        if self.ttl_seconds is None or self.ttl_seconds <= 0:
            return None
        return self.created_at + timedelta(seconds=self.ttl_seconds)

    def is_expired(self) -> bool:
        """Check whether the entry is past its expiration time."""
        return self.expires_at is not None and datetime.now() > self.expires_at

    def remaining_ttl(self) -> int:
        """Whole seconds until expiration, 0 if expired or never expiring."""
        if self.expires_at is None:
            return 0
        remaining = (self.expires_at - datetime.now()).total_seconds()
        return max(0, int(remaining))

    def to_json(self) -> str:
        """Serialize to the transport format.

        Raises:
            pydantic_core.PydanticSerializationError: If the content is not serializable
        """
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "CacheEntry":
        """Deserialize from the transport format.

        Raises:
            pydantic.ValidationError: If the payload is not a valid entry
        """
        return cls.model_validate_json(raw)
