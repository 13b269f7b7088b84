"""Response DTOs.

``ApiResponse`` is the uniform envelope every service operation returns.
It serializes with camelCase keys; ``None`` fields are dropped by the API
layer.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from reference_cache.errors import ErrorKind
from reference_cache.utils import format_datetime, now

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success/error envelope returned by every public operation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = Field(..., description="Whether the operation succeeded")
    message: str | None = Field(None, description="Human-readable status message")
    data: T | None = Field(None, description="Operation payload")
    reference_id: str | None = Field(None, description="Reference ID the operation concerns")
    error: str | None = Field(None, description="Error message when unsuccessful")
    errors: list[str] | None = Field(None, description="Individual error details")
    metadata: dict[str, Any] | None = Field(None, description="Additional information")
    timestamp: datetime = Field(default_factory=now, description="When the envelope was built")
    status_code: int | None = Field(None, description="HTTP status matching the outcome")

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str | None:
        return format_datetime(value)

    @classmethod
    def ok(
        cls,
        message: str,
        data: Any = None,
        reference_id: str | None = None,
    ) -> "ApiResponse":
        """Build a successful envelope."""
        return cls(
            success=True,
            message=message,
            data=data,
            reference_id=reference_id,
            status_code=200,
        )

    @classmethod
    def fail(
        cls,
        error: str,
        kind: ErrorKind = ErrorKind.INTERNAL,
        errors: list[str] | None = None,
        reference_id: str | None = None,
    ) -> "ApiResponse":
        """Build an unsuccessful envelope tagged with its error kind."""
        return cls(
            success=False,
            error=error,
            errors=errors,
            reference_id=reference_id,
            metadata={"errorKind": kind.value},
            status_code=kind.status_code,
        )

    @property
    def error_kind(self) -> ErrorKind | None:
        """The error kind of an unsuccessful envelope."""
        if self.success or not self.metadata or "errorKind" not in self.metadata:
            return None
        return ErrorKind(self.metadata["errorKind"])

    def to_content(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and ``None`` fields dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
