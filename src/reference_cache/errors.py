"""Error taxonomy shared by the service and HTTP layers."""

from enum import Enum


class ErrorKind(str, Enum):
    """Why an operation did not succeed.

    Each kind carries the HTTP status the API layer answers with.
    """

    SERIALIZATION = "SERIALIZATION"
    NOT_FOUND = "NOT_FOUND"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    BACKEND = "BACKEND"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.SERIALIZATION: 500,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.TYPE_MISMATCH: 422,
    ErrorKind.BACKEND: 503,
    ErrorKind.VALIDATION: 400,
    ErrorKind.INTERNAL: 500,
}


class BackendUnavailableError(Exception):
    """Raised when the key-value backend cannot be reached at startup."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Key-value backend at {url} is unavailable: {reason}")
