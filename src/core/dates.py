"""Calendar-date helpers.

All comparisons here are on calendar days only; time-of-day components are
dropped before any arithmetic.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from src.core.errors import ValidationError

_ISO_DATE_LENGTH = len("YYYY-MM-DD")


def parse_iso_date(value: str | date | datetime) -> date:
    """Coerce an ISO date string, date, or datetime to a date.

    Strings must be exactly ``YYYY-MM-DD`` or a complete ISO datetime
    (``YYYY-MM-DDTHH:MM[:SS][+HH:MM]``, ``T`` or a space as separator).
    The whole string is parsed; trailing characters are an error.

    Raises:
        ValidationError: If a string is not a valid ISO calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Expected ISO date string, got {type(value).__name__}")

    text = value.strip()
    try:
        if len(text) == _ISO_DATE_LENGTH:
            return date.fromisoformat(text)
        if len(text) > _ISO_DATE_LENGTH and text[_ISO_DATE_LENGTH] in "T ":
            return datetime.fromisoformat(text).date()
    except ValueError as e:
        raise ValidationError(f"Malformed date {value!r}: expected YYYY-MM-DD") from e
    raise ValidationError(f"Malformed date {value!r}: expected YYYY-MM-DD")


def day_offsets(start: date, days: int) -> list[date]:
    """Return ``days`` consecutive calendar dates beginning at ``start``."""
    return [start + timedelta(days=i) for i in range(days)]


def today_in(tz_name: str) -> date:
    """Current calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()
