"""Reference ID generation.

Identifiers look like ``PREFIX-YYYYMMDDHHMMSS-RANDOM-SEQUENCE``, e.g.
``CLD-20241019143015-K3Z9QA-0042``. Short and UUID-based variants drop the
timestamp.
"""

import secrets
import threading
import uuid
from datetime import datetime
from enum import Enum

import structlog

from reference_cache.config import settings
from reference_cache.entities import GeneratorStats

logger = structlog.get_logger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
TIMESTAMP_LENGTH = 14
RANDOM_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class IdPrefix(str, Enum):
    """Canonical reference ID prefixes."""

    CLOUD = "CLD"
    AZURE = "AZR"
    GCP = "GCP"
    SPLUNK = "SPL"
    USER = "USR"
    DOCUMENT = "DOC"
    TRANSACTION = "TXN"
    LOG = "LOG"
    CACHE = "CACHE"
    SYSTEM = "SYS"


CANONICAL_PREFIXES = frozenset(prefix.value for prefix in IdPrefix)


class AtomicCounter:
    """Thread-safe monotonically increasing counter."""

    def __init__(self, start: int = 1) -> None:
        self._value = start
        self._lock = threading.Lock()

    def get_and_increment(self) -> int:
        with self._lock:
            value = self._value
            self._value += 1
            return value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class ReferenceIdGenerator:
    """Mints typed, human-parseable reference IDs.

    A single sequence counter is shared by every prefix and every thread
    using this instance. It lives in memory only, so a restart begins again
    at 1.

    This class never raises: blank prefixes fall back to the default prefix
    and the extraction helpers return ``None`` on bad input.

    Example:
        ```python
        generator = ReferenceIdGenerator()
        generator.generate()            # CLD-20241019143015-K3Z9QA-0001
        generator.generate_azure_id()   # AZR-20241019143015-7QW2MB-0002
        generator.generate_short("doc") # DOC-Q8W2MB1Z-003
        ```
    """

    def __init__(
        self,
        default_prefix: str | None = None,
        random_length: int | None = None,
        counter: AtomicCounter | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            default_prefix: Prefix used when none is given. Defaults to settings.
            random_length: Length of the random segment. Defaults to settings.
            counter: Sequence counter to use. A fresh one starting at 1 if None.
        """
        self._default_prefix = (default_prefix or settings.id_default_prefix).upper()
        self._random_length = settings.id_random_length if random_length is None else random_length
        self._counter = counter or AtomicCounter()

    def generate(self, prefix: str | None = None) -> str:
        """Generate a full reference ID: ``PREFIX-TIMESTAMP-RANDOM-SEQUENCE``."""
        reference_id = "-".join(
            [
                self._normalize_prefix(prefix),
                self._timestamp(),
                self._random_string(self._random_length),
                f"{self._counter.get_and_increment() % 10000:04d}",
            ]
        )
        logger.debug("reference id generated", reference_id=reference_id)
        return reference_id

    def generate_short(self, prefix: str | None = None) -> str:
        """Generate a short reference ID: ``PREFIX-RANDOM-SEQUENCE``."""
        reference_id = "-".join(
            [
                self._normalize_prefix(prefix),
                self._random_string(8),
                f"{self._counter.get_and_increment() % 1000:03d}",
            ]
        )
        logger.debug("short reference id generated", reference_id=reference_id)
        return reference_id

    def generate_uuid_based(self, prefix: str | None = None) -> str:
        """Generate ``PREFIX-<12 hex chars of a random UUID>``."""
        reference_id = f"{self._normalize_prefix(prefix)}-{uuid.uuid4().hex[:12]}"
        logger.debug("uuid reference id generated", reference_id=reference_id)
        return reference_id

    def generate_custom(
        self,
        prefix: str | None,
        include_timestamp: bool = True,
        random_length: int = 6,
        include_sequence: bool = True,
    ) -> str:
        """Generate a reference ID from the selected segments.

        Args:
            prefix: Leading segment (default prefix if blank)
            include_timestamp: Append the ``YYYYMMDDHHMMSS`` segment
            random_length: Length of the random segment, omitted when not positive
            include_sequence: Append the 4-digit sequence segment

        Returns:
            The segments joined by ``-``; may be the prefix alone
        """
        parts = [self._normalize_prefix(prefix)]
        if include_timestamp:
            parts.append(self._timestamp())
        if random_length > 0:
            parts.append(self._random_string(random_length))
        if include_sequence:
            parts.append(f"{self._counter.get_and_increment() % 10000:04d}")

        reference_id = "-".join(parts)
        logger.debug("custom reference id generated", reference_id=reference_id)
        return reference_id

    def generate_cloud_id(self) -> str:
        return self.generate(IdPrefix.CLOUD.value)

    def generate_azure_id(self) -> str:
        return self.generate(IdPrefix.AZURE.value)

    def generate_gcp_id(self) -> str:
        return self.generate(IdPrefix.GCP.value)

    def generate_splunk_id(self) -> str:
        return self.generate(IdPrefix.SPLUNK.value)

    def generate_user_id(self) -> str:
        return self.generate(IdPrefix.USER.value)

    def generate_document_id(self) -> str:
        return self.generate(IdPrefix.DOCUMENT.value)

    def generate_transaction_id(self) -> str:
        return self.generate(IdPrefix.TRANSACTION.value)

    def generate_log_id(self) -> str:
        return self.generate(IdPrefix.LOG.value)

    def generate_cache_id(self) -> str:
        return self.generate(IdPrefix.CACHE.value)

    def generate_system_id(self) -> str:
        return self.generate(IdPrefix.SYSTEM.value)

    def generate_for_type(self, type_name: str) -> str:
        """Generate an ID for a named type such as ``azure`` or ``document``.

        Unknown type names are used verbatim as the prefix.
        """
        member = IdPrefix.__members__.get(type_name.strip().upper())
        if member is None or member is IdPrefix.CLOUD:
            return self.generate(type_name)
        return self.generate(member.value)

    def is_valid(self, reference_id: str | None) -> bool:
        """Check that an ID has at least two segments and a canonical prefix.

        IDs minted with a custom, non-canonical prefix are reported invalid.
        """
        if not reference_id or not reference_id.strip():
            return False

        parts = reference_id.split("-")
        while parts and not parts[-1]:
            parts.pop()
        if len(parts) < 2:
            return False

        return parts[0] in CANONICAL_PREFIXES

    def extract_prefix(self, reference_id: str | None) -> str | None:
        """Return the first ``-``-delimited segment, or None for blank input."""
        if not reference_id or not reference_id.strip():
            return None
        return reference_id.split("-")[0]

    def extract_timestamp(self, reference_id: str | None) -> datetime | None:
        """Parse the second segment as ``YYYYMMDDHHMMSS``, None if it isn't one."""
        if not reference_id or not reference_id.strip():
            return None

        parts = reference_id.split("-")
        if len(parts) < 2 or len(parts[1]) != TIMESTAMP_LENGTH:
            return None

        try:
            return datetime.strptime(parts[1], TIMESTAMP_FORMAT)
        except ValueError:
            logger.debug("no timestamp in reference id", reference_id=reference_id)
            return None

    def stats(self) -> GeneratorStats:
        """Snapshot of the generator state."""
        return GeneratorStats(
            total_generated=self._counter.value,
            available_prefixes=len(CANONICAL_PREFIXES),
            last_generated=datetime.now(),
        )

    @property
    def default_prefix(self) -> str:
        """Get the prefix used when none is supplied."""
        return self._default_prefix

    def _normalize_prefix(self, prefix: str | None) -> str:
        if prefix is None or not prefix.strip():
            return self._default_prefix
        return prefix.upper()

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime(TIMESTAMP_FORMAT)

    @staticmethod
    def _random_string(length: int) -> str:
        return "".join(secrets.choice(RANDOM_ALPHABET) for _ in range(length))
