from datetime import UTC, datetime


def utcnow_naive():
    """Current UTC time as a naive datetime, matching the DB timestamp columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def isoformat_or_none(value):
    return value.isoformat() if value else None
