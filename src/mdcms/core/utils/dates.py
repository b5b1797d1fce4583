"""ISO-8601 timestamp helpers for publication dates"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime (trailing 'Z' allowed). Naive values are taken as UTC.

    Returns None for missing or unparseable input.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def isoformat_utc(moment: datetime) -> str:
    """Render a datetime as UTC ISO-8601 with millisecond precision and a 'Z' suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
