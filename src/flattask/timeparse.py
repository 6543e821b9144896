"""
Date-time expressions accepted by the task tools.

Two forms are understood, tried in this order:

* absolute: ``HH:MM YYYY-MM-DD`` (24-hour clock, UTC)
* short: an offset in days from a reference time (normally now)

  ============  ==========================================
  ``.``         the reference time itself
  ``.^``        00:00 on the reference day
  ``.$``        23:59 on the reference day
  ``N``         reference shifted by N days (N may be signed)
  ``N^``        00:00, N days from the reference day
  ``N$``        23:59, N days from the reference day
  ============  ==========================================

Everything works in UTC at minute resolution.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from flattask.recovery import DateParseError

ABSOLUTE_PATTERN = re.compile(r'([0-9]{2}):([0-9]{2}) ([0-9]{4})-([0-9]{2})-([0-9]{2})')
OFFSET_PATTERN = re.compile(r'[+-]?[0-9]+')

OFFSET_START = "+-0123456789"

START_OF_DAY = "^"
END_OF_DAY = "$"

BAD_SHORT_MODIFIER = "invalid short datetime modifier '{}', only '^' and '$' can be used"
BAD_SHORT_START = "short datetime must start with either '.' or a decimal integer, got '{}'"


def to_utc_minute(value: datetime) -> datetime:
    """Normalise a datetime to an aware UTC value with seconds dropped.

    Naive values are taken to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(second=0, microsecond=0)


def utc_now() -> datetime:
    return to_utc_minute(datetime.now(timezone.utc))


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59)


def format_datetime(value: datetime) -> str:
    """Render a timestamp in the absolute ``HH:MM YYYY-MM-DD`` form."""
    value = to_utc_minute(value)
    return f"{value.hour:02d}:{value.minute:02d} {value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_absolute(expr: str) -> Optional[datetime]:
    """
    Parse the absolute form.

    Returns:
        The timestamp, or None if ``expr`` is not exactly a valid
        ``HH:MM YYYY-MM-DD`` string (trailing characters included).
    """
    match = ABSOLUTE_PATTERN.fullmatch(expr)
    if not match:
        return None

    hour, minute, year, month, day = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    except ValueError:
        return None


def _apply_modifier(value: datetime, modifier: str) -> datetime:
    if modifier == "":
        return value
    if modifier == START_OF_DAY:
        return start_of_day(value)
    if modifier == END_OF_DAY:
        return end_of_day(value)
    raise DateParseError(BAD_SHORT_MODIFIER.format(modifier))


def parse_short(expr: str, reference: datetime) -> datetime:
    """
    Parse the short form relative to ``reference``.

    Raises:
        DateParseError: The expression does not start with ``.``, a sign or a
            digit, or is followed by something other than ``^``/``$``.
    """
    reference = to_utc_minute(reference)

    if expr.startswith("."):
        return _apply_modifier(reference, expr[1:])

    if expr and expr[0] in OFFSET_START:
        match = OFFSET_PATTERN.match(expr)
        if not match:
            # A bare sign, nothing was converted
            raise DateParseError(BAD_SHORT_MODIFIER.format(expr))
        try:
            shifted = reference + timedelta(days=int(match.group()))
        except (OverflowError, ValueError) as e:
            raise DateParseError(f"day offset out of range in '{expr}'") from e
        return _apply_modifier(shifted, expr[match.end():])

    raise DateParseError(BAD_SHORT_START.format(expr))


def parse_datetime(expr: str, reference: Optional[datetime] = None) -> datetime:
    """
    Parse a date-time expression into a UTC timestamp.

    Args:
        expr: Absolute ``HH:MM YYYY-MM-DD`` or a short expression.
        reference: Time the short form is relative to; defaults to now.

    Returns:
        An aware UTC datetime with zero seconds.

    Raises:
        DateParseError: Neither form accepts the expression.

    Example:
        >>> parse_datetime("09:30 2024-03-01")
        datetime.datetime(2024, 3, 1, 9, 30, tzinfo=datetime.timezone.utc)
    """
    absolute = parse_absolute(expr)
    if absolute is not None:
        return absolute

    if reference is None:
        reference = utc_now()
    return parse_short(expr, reference)
