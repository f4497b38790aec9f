"""Shared shape of entities that go through a moderator review."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

PENDING = "pending"


class Reviewable(Protocol):
    """Anything with a pending status that a moderator settles exactly once."""

    id: int
    status: str
    reason: Optional[str]
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
