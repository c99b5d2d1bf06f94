"""
Timestamp extraction for loosely typed JSON log lines.

Strings are tried against TIMESTAMP_LAYOUTS in order and then as a bare
numeric epoch. Numbers are epochs whose unit is inferred from their
magnitude with the EPOCH_UNITS ladder, largest threshold first, so that
second, millisecond, microsecond and nanosecond epochs for the same instant
all resolve to the same datetime.
"""
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .values import ValueKind, kind_of, to_text

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

NANOS_PER_SECOND = 1_000_000_000

# (name, strptime format). Order matters: the first match wins.
TIMESTAMP_LAYOUTS = (
    ("rfc3339-fraction", "%Y-%m-%dT%H:%M:%S.%f%z"),
    ("rfc3339", "%Y-%m-%dT%H:%M:%S%z"),
    ("datetime-fraction", "%Y-%m-%d %H:%M:%S.%f"),
    ("datetime", "%Y-%m-%d %H:%M:%S"),
    ("day-first", "%d/%m/%Y %H:%M:%S"),
)

# strptime's %f stops at microseconds; longer fractions are cut down first
_LONG_FRACTION = re.compile(r"(?<=:\d\d\.)(\d{6})\d+")


@dataclass(frozen=True)
class EpochUnit:
    name: str
    threshold: Optional[float]
    nanos: int


EPOCH_UNITS = (
    EpochUnit("nanoseconds", 1e18, 1),
    EpochUnit("microseconds", 1e15, 1_000),
    EpochUnit("milliseconds", 1e12, 1_000_000),
    EpochUnit("seconds", 1e9, NANOS_PER_SECOND),
)
FRACTIONAL_SECONDS = EpochUnit("fractional-seconds", None, NANOS_PER_SECOND)

Number = Union[int, float]
TimestampResult = Tuple[Optional[datetime], str]


def epoch_unit(value: Number) -> EpochUnit:
    for unit in EPOCH_UNITS:
        if value > unit.threshold:
            return unit
    return FRACTIONAL_SECONDS


def epoch_to_datetime(value: Number) -> datetime:
    """Convert a numeric epoch of inferred unit to an aware UTC datetime.

    Raises OverflowError or ValueError for values that do not map to a
    representable datetime (out of range, NaN, infinity).
    """
    unit = epoch_unit(value)
    if isinstance(value, int):
        nanos = value * unit.nanos
    else:
        # Decimal keeps sub-second digits that float multiplication would round off
        nanos = int(Decimal(repr(value)) * unit.nanos)
    return EPOCH + timedelta(microseconds=nanos // 1000)


def _parse_number(text: str) -> Optional[Number]:
    text = text.strip()
    # int() and float() accept digit separators
    if "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_time_string(text: str) -> Optional[datetime]:
    candidate = _LONG_FRACTION.sub(r"\1", text)
    for _name, layout in TIMESTAMP_LAYOUTS:
        try:
            parsed = datetime.strptime(candidate, layout)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    number = _parse_number(text)
    if number is None:
        return None
    try:
        return epoch_to_datetime(number)
    except (OverflowError, ValueError):
        return None


def format_rfc3339(value: datetime) -> str:
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")

    offset = value.utcoffset()
    if offset is None or offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return text + f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _from_string(value: str) -> TimestampResult:
    parsed = parse_time_string(value)
    if parsed is None:
        return None, value
    return parsed, format_rfc3339(parsed)


def _from_number(value: Number) -> TimestampResult:
    try:
        parsed = epoch_to_datetime(value)
    except (OverflowError, ValueError):
        return None, to_text(value)
    return parsed, format_rfc3339(parsed)


def _absent(value: Any) -> TimestampResult:
    return None, ""


def _as_text(value: Any) -> TimestampResult:
    return None, to_text(value)


_EXTRACTORS: Dict[ValueKind, Callable[[Any], TimestampResult]] = {
    ValueKind.MISSING: _absent,
    ValueKind.NULL: _absent,
    ValueKind.STRING: _from_string,
    ValueKind.INTEGER: _from_number,
    ValueKind.FLOAT: _from_number,
    ValueKind.BOOLEAN: _as_text,
    ValueKind.OBJECT: _as_text,
    ValueKind.ARRAY: _as_text,
}


def extract_timestamp(value: Any) -> TimestampResult:
    """Return (absolute timestamp or None, best-effort text) for a field value."""
    return _EXTRACTORS[kind_of(value)](value)
