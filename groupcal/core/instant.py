"""
Instants: points in time parsed from ISO-8601 text and rendered back for
transport. All instants are normalised to UTC.
"""

from datetime import datetime, timezone

from .errors import InvalidInputError


class InvalidDate(InvalidInputError):
    pass


def parse_instant(text: str) -> datetime:
    """
    Parse ISO-8601 text into a timezone-aware UTC datetime. Text without an
    offset is taken to be UTC.

    Raises
    ------
    InvalidDate
        If the text cannot be parsed.
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidDate(
            f"Invalid date format: {text!r}. Please use ISO format "
            "(e.g., 'YYYY-MM-DDTHH:MM:SSZ')."
        )

    value = text.strip()

    # fromisoformat only learned about 'Z' in 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"

    try:
        # Offsets can push an in-range local time out of range in UTC
        return as_utc(datetime.fromisoformat(value))
    except (ValueError, OverflowError):
        raise InvalidDate(
            f"Invalid date format: {text!r}. Please use ISO format "
            "(e.g., 'YYYY-MM-DDTHH:MM:SSZ')."
        )


def as_utc(instant: datetime) -> datetime:
    """
    Attach UTC to naive datetimes (as read back from SQLite) and convert aware
    ones to UTC.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)

    return instant.astimezone(timezone.utc)


def render_instant(instant: datetime) -> str:
    """
    Render an instant as millisecond-precision ISO-8601 text with a 'Z' suffix,
    e.g. ``2024-12-31T18:30:00.000Z``.
    """
    return (
        as_utc(instant).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )
