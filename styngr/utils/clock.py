from datetime import datetime, timezone


def current_utc_offset() -> str:
    """Local UTC offset formatted as +HH:MM / -HH:MM."""
    offset = datetime.now().astimezone().utcoffset()
    total_minutes = int(offset.total_seconds() // 60) if offset else 0

    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def to_iso_timestamp(unix_seconds: float) -> str:
    """Unix timestamp to an ISO-8601 UTC date, e.g. 2024-01-01T00:00:00Z"""
    moment = datetime.fromtimestamp(unix_seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")
