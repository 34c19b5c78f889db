from datetime import UTC, datetime


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime. Naive values are taken as local time."""
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Textual form of a timestamp as persisted by the backends."""
    return ensure_utc(value).isoformat()


def parse_timestamp(text: str) -> datetime:
    """Inverse of format_timestamp; also accepts naive ISO strings."""
    return ensure_utc(datetime.fromisoformat(text.strip()))
