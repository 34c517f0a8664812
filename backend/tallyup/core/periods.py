"""
Month period keys ("YYYY-MM") and their UTC boundaries.

Date-like input arrives in three shapes: native ``date``/``datetime`` values,
``YYYY-MM-DD`` calendar strings, and ``{seconds, nanoseconds}`` timestamps handed
out by document stores. ``to_date_like`` resolves the shape once; everything after
that works on a single normalized instant: the value's calendar date, in the zone
it was constructed in, at local noon. Pinning the time to noon keeps a date from
flipping to the neighbouring day (and month) when it crosses a UTC/local boundary.
"""
import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Mapping, Optional, Union

from tallyup.core.exceptions import InvalidPeriodKey, UnparseableDate

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
PERIOD_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True)
class NativeDate:
    """A ``date`` or ``datetime`` built by Python code."""
    value: Union[date, datetime]


@dataclass(frozen=True)
class IsoCalendarDate:
    """A ``YYYY-MM-DD`` calendar date string."""
    text: str


@dataclass(frozen=True)
class EpochTimestamp:
    """Seconds/nanoseconds since the Unix epoch."""
    seconds: int
    nanoseconds: int = 0


DateLike = Union[NativeDate, IsoCalendarDate, EpochTimestamp]


@dataclass(frozen=True)
class PeriodResolution:
    """Period key derived from a date-like value, and whether it fell back to now."""
    key: str
    fell_back: bool


@dataclass(frozen=True)
class PeriodBounds:
    """Inclusive UTC interval covering one calendar month."""
    start: datetime
    end: datetime

    def contains(self, value: Any, tz: Optional[tzinfo] = None) -> bool:
        """Check whether the calendar date of ``value`` falls inside the month."""
        instant = normalize_instant(to_date_like(value), tz)
        wall_clock = instant.replace(tzinfo=timezone.utc)
        return self.start <= wall_clock <= self.end


def _epoch_timestamp(seconds: Any, nanoseconds: Any, raw: Any) -> EpochTimestamp:
    if isinstance(seconds, bool) or isinstance(nanoseconds, bool):
        raise UnparseableDate(raw)
    try:
        return EpochTimestamp(int(seconds), int(nanoseconds or 0))
    except (TypeError, ValueError, OverflowError):
        raise UnparseableDate(raw)


def to_date_like(value: Any) -> DateLike:
    """Classify a raw date-like value. Raises UnparseableDate for anything else."""
    if isinstance(value, (NativeDate, IsoCalendarDate, EpochTimestamp)):
        return value
    if isinstance(value, date):
        return NativeDate(value)
    if isinstance(value, str):
        text = value.strip()
        if ISO_DATE_PATTERN.match(text):
            return IsoCalendarDate(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return NativeDate(datetime.fromisoformat(text))
        except ValueError:
            raise UnparseableDate(value)
    if isinstance(value, Mapping):
        if value.get("seconds") is None:
            raise UnparseableDate(value)
        return _epoch_timestamp(value["seconds"], value.get("nanoseconds", 0), value)
    if getattr(value, "seconds", None) is not None and hasattr(value, "nanoseconds"):
        return _epoch_timestamp(value.seconds, value.nanoseconds, value)
    for converter in ("to_datetime", "ToDatetime"):
        method = getattr(value, converter, None)
        if callable(method):
            converted = method()
            if isinstance(converted, datetime):
                return NativeDate(converted)
    raise UnparseableDate(value)


def normalize_instant(date_like: DateLike, tz: Optional[tzinfo] = None) -> datetime:
    """
    Turn a DateLike into its calendar date at 12:00:00.000.

    Naive and aware datetimes keep their own zone. Epoch timestamps are read in
    ``tz``, or in the system local zone when ``tz`` is None.
    """
    if isinstance(date_like, NativeDate):
        value = date_like.value
        if isinstance(value, datetime):
            return value.replace(hour=12, minute=0, second=0, microsecond=0)
        return datetime(value.year, value.month, value.day, 12)

    if isinstance(date_like, IsoCalendarDate):
        match = ISO_DATE_PATTERN.match(date_like.text.strip())
        if not match:
            raise UnparseableDate(date_like.text)
        year, month, day = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day, 12)
        except ValueError:
            raise UnparseableDate(date_like.text)

    if isinstance(date_like, EpochTimestamp):
        try:
            instant = datetime.fromtimestamp(date_like.seconds, tz)
        except (OverflowError, OSError, ValueError):
            raise UnparseableDate(date_like)
        return instant.replace(hour=12, minute=0, second=0, microsecond=0)

    raise UnparseableDate(date_like)


def format_period_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def resolve_period(value: Any, tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> PeriodResolution:
    """
    Derive the period key of ``value``.

    Missing or unparseable input falls back to the month of ``now`` (the system
    clock when not given) with ``fell_back`` set. Never raises.
    """
    try:
        if value is None:
            raise UnparseableDate(value)
        instant = normalize_instant(to_date_like(value), tz)
        return PeriodResolution(format_period_key(instant.year, instant.month), False)
    except UnparseableDate:
        current = now if now is not None else datetime.now(tz)
        return PeriodResolution(format_period_key(current.year, current.month), True)


def period_key_of(value: Any, tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> str:
    """Period key ("YYYY-MM") of a date-like value."""
    return resolve_period(value, tz=tz, now=now).key


def parse_period_key(key: str):
    """Split a period key into (year, month). Raises InvalidPeriodKey."""
    if not isinstance(key, str):
        raise InvalidPeriodKey(key)
    match = PERIOD_KEY_PATTERN.match(key.strip())
    if not match:
        raise InvalidPeriodKey(key)
    year, month = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= month <= 12:
        raise InvalidPeriodKey(key)
    return year, month


def period_boundaries(key: str) -> PeriodBounds:
    """First and last instant (UTC, millisecond precision) of the month ``key``."""
    year, month = parse_period_key(key)
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, 0, 0, 0, 0, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, 999000, tzinfo=timezone.utc)
    return PeriodBounds(start=start, end=end)
