from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time; services take it as an injectable clock."""
    return datetime.now(timezone.utc)
