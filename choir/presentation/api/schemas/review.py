from typing import Optional

from .base import CamelPayload


class ReviewReasonPayload(CamelPayload):
    """Body of a decline/reject call; the reason must not be blank."""

    reason: Optional[str] = None
