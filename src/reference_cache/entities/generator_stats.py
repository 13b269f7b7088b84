"""Reference ID generator statistics entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class GeneratorStats:
    """Point-in-time snapshot of the reference ID generator.

    Attributes:
        total_generated: Current value of the shared sequence counter
        available_prefixes: Number of canonical prefixes
        last_generated: When the snapshot was taken
    """

    total_generated: int
    available_prefixes: int
    last_generated: datetime
