"""Mutable state of one REPL session."""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_ROW_LIMIT = 20
DEFAULT_COLUMN_LIMIT = 10

# Row limits for the re-run commands
LIST_ROW_LIMIT = 1
ALL_ROW_LIMIT = 1000


@dataclass
class SessionOptions:
    """Display limits, applied at render time only."""
    row_limit: int = DEFAULT_ROW_LIMIT
    column_limit: int = DEFAULT_COLUMN_LIMIT

    @classmethod
    def from_settings(cls, settings) -> "SessionOptions":
        return cls(row_limit=settings.row_limit, column_limit=settings.column_limit)


@dataclass
class SessionState:
    """Options plus the last successful ``select``, used by ``:list``/``:all``/``:export``."""
    options: SessionOptions = field(default_factory=SessionOptions)
    last_select: Optional[str] = None
