from datetime import UTC, datetime


def _utc_now() -> datetime:
    """Return current UTC time truncated to millisecond precision."""
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to integer milliseconds since the Unix epoch."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(round(value.timestamp() * 1000))


def from_epoch_millis(value: int | float) -> datetime:
    """Convert milliseconds since the Unix epoch to a UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)
