"""
Guest entries and their validation.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class GuestEntry(BaseModel):
    """One signed entry of the guest book."""
    model_config = ConfigDict(frozen=True)

    id: PositiveInt
    name: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    origin_host: Optional[str] = None

    @classmethod
    def candidate(cls, id: int, name: Optional[str], message: Optional[str],
                  origin_host: Optional[str] = None) -> 'GuestEntry':
        """Build an unvalidated entry from raw form input, trimming both fields."""
        return cls(id=id,
                   name=(name or "").strip(),
                   message=(message or "").strip(),
                   origin_host=origin_host)


def _field(candidate: Any, name: str) -> str:
    if isinstance(candidate, Mapping):
        value = candidate.get(name)
    else:
        value = getattr(candidate, name, None)
    return value if isinstance(value, str) else ""


def is_valid(candidate: Any) -> bool:
    """True when both name and message are non-empty after trimming."""
    return len(_field(candidate, "name").strip()) > 0 and len(_field(candidate, "message").strip()) > 0
