"""ISO8601 duration values with calendar-aware arithmetic"""
import datetime
import logging
from dataclasses import dataclass
from typing import ClassVar, Iterator, TypeAlias

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

# unsigned 32-bit range
MAX_COMPONENT = 2**32 - 1

_UNITS = ("years", "months", "weeks", "days", "hours", "minutes", "seconds")
_DIGITS = "0123456789"
_DATE_DESIGNATORS = ("Y", "years", "M", "months", "W", "weeks", "D", "days")
_TIME_DESIGNATORS = ("H", "hours", "M", "minutes", "S", "seconds")

_FNV_OFFSET_BASIS = 2166136261
_FNV_PRIME = 16777619

Components: TypeAlias = Iterator[tuple[str, str]]
Measurements: TypeAlias = Iterator[tuple[str, int]]


class DurationFormatError(ValueError):
    """Raised when text cannot be parsed as an ISO8601 duration"""


@dataclass(frozen=True, slots=True, repr=False)
class Duration:
    """Immutable ISO8601 duration measured in whole years, months, weeks, days,
    hours, minutes and seconds.

    Components are kept exactly as given and never carried into one another, so
    ``Duration(weeks=1)`` and ``Duration(days=7)`` are distinct values.
    """

    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    ZERO: ClassVar["Duration"]

    def __post_init__(self) -> None:
        for unit in _UNITS:
            value = getattr(self, unit)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{unit} must be an int, not {type(value).__name__}")
            if value < 0:
                raise ValueError(f"{unit} value of {value} must not be negative")
            if value > MAX_COMPONENT:
                raise OverflowError(f"{unit} value of {value} exceeds range [0..{MAX_COMPONENT}]")

    def __repr__(self) -> str:
        arguments = ", ".join(f"{unit}={getattr(self, unit)}" for unit in _UNITS if getattr(self, unit))
        return f"iso8601_duration.Duration({arguments})"

    def __str__(self) -> str:
        return self.isoformat()

    def __hash__(self) -> int:
        result = _FNV_OFFSET_BASIS
        for unit in _UNITS:
            result = ((result * _FNV_PRIME) & 0xFFFFFFFF) ^ getattr(self, unit)
        return result

    def __bool__(self) -> bool:
        return any(getattr(self, unit) for unit in _UNITS)

    def __add__(self, other: object):
        if isinstance(other, Duration):
            return Duration(**{unit: getattr(self, unit) + getattr(other, unit) for unit in _UNITS})
        if isinstance(other, datetime.date):
            return add(other, self)
        return NotImplemented

    __radd__ = __add__

    def __rsub__(self, other: object):
        if isinstance(other, datetime.date):
            return subtract(other, self)
        return NotImplemented

    @staticmethod
    def _parse(duration: Iterator[str]) -> Components:
        """Parser for ISO-8601 duration strings

        Date measurements are situated between the initial 'P' and the (optional)
        'T' character, and time measurements follow the 'T' character.

        The implementation sweeps through the input exactly once. Each unit
        designator is located by advancing an iterator over the designators that
        may still appear, so a designator that is repeated or out of order finds
        the iterator already past it. The 'T' character swaps in the time
        designators, and is only accepted while the date designators are active.
        """
        if next(duration, "") != "P":
            raise ValueError("durations must begin with the character 'P'")

        date_context = iter(_DATE_DESIGNATORS)
        context, accumulator, unit = date_context, "", ""
        for char in duration:
            if char in _DIGITS:
                accumulator += char
                continue

            if char == "T" and context is date_context:
                if accumulator:
                    raise ValueError(f"missing unit designator after '{accumulator}'")
                context, unit = iter(_TIME_DESIGNATORS), ""
                continue

            if char not in context:
                raise ValueError(f"unexpected character '{char}'")
            if not accumulator:
                raise ValueError(f"missing value before unit designator '{char}'")

            value, unit, accumulator = accumulator, next(context), ""
            yield value, unit

        if accumulator:
            raise ValueError(f"missing unit designator after '{accumulator}'")
        if not unit:
            raise ValueError("no measurements found" if context is date_context else "no measurements found after 'T'")

    @staticmethod
    def _to_measurements(components: Components) -> Measurements:
        limit = len(str(MAX_COMPONENT))
        for value, unit in components:
            if len(value.lstrip("0")) > limit or int(value) > MAX_COMPONENT:
                raise ValueError(f"{unit} value of {value} exceeds range [0..{MAX_COMPONENT}]")
            yield unit, int(value)

    @classmethod
    def fromisoformat(cls, duration: str) -> "Duration":
        """Parses an input string and returns a :py:class:`Duration` result

        :raises: `TypeError` when the input is not a str (including `None`)
        :raises: `DurationFormatError` with an explanatory message when parsing fails
        """
        if not isinstance(duration, str):
            raise TypeError(f"expected duration to be a str, not {type(duration).__name__}")
        try:
            return cls(**dict(cls._to_measurements(cls._parse(iter(duration)))))
        except ValueError as exc:
            raise DurationFormatError(f"could not parse duration '{duration}': {exc}") from exc

    @classmethod
    def try_fromisoformat(cls, duration: str | None) -> tuple[bool, "Duration"]:
        """Non-raising variant of :py:meth:`fromisoformat`

        Returns ``(True, duration)`` on success, otherwise ``(False, Duration.ZERO)``.
        """
        try:
            return True, cls.fromisoformat(duration)  # type: ignore[arg-type]
        except (TypeError, DurationFormatError) as exc:
            logger.debug("rejected duration %r: %s", duration, exc)
            return False, Duration.ZERO

    def isoformat(self) -> str:
        """Produce the canonical ISO8601 representation of this :py:class:`Duration`"""
        result = "P"
        result += f"{self.years}Y" if self.years else ""
        result += f"{self.months}M" if self.months else ""
        result += f"{self.weeks}W" if self.weeks else ""
        result += f"{self.days}D" if self.days else ""
        if self.hours or self.minutes or self.seconds:
            result += "T"
            result += f"{self.hours}H" if self.hours else ""
            result += f"{self.minutes}M" if self.minutes else ""
            result += f"{self.seconds}S" if self.seconds else ""
        return result if result != "P" else "P0D"

    @classmethod
    def from_years(cls, years: int) -> "Duration":
        """Create a :py:class:`Duration` of `years` only"""
        return cls(years=years)

    @classmethod
    def from_months(cls, months: int) -> "Duration":
        """Create a :py:class:`Duration` of `months` only"""
        return cls(months=months)

    @classmethod
    def from_weeks(cls, weeks: int) -> "Duration":
        """Create a :py:class:`Duration` of `weeks` only"""
        return cls(weeks=weeks)

    @classmethod
    def from_days(cls, days: int) -> "Duration":
        """Create a :py:class:`Duration` of `days` only"""
        return cls(days=days)

    @classmethod
    def from_hours(cls, hours: int) -> "Duration":
        """Create a :py:class:`Duration` of `hours` only"""
        return cls(hours=hours)

    @classmethod
    def from_minutes(cls, minutes: int) -> "Duration":
        """Create a :py:class:`Duration` of `minutes` only"""
        return cls(minutes=minutes)

    @classmethod
    def from_seconds(cls, seconds: int) -> "Duration":
        """Create a :py:class:`Duration` of `seconds` only"""
        return cls(seconds=seconds)


Duration.ZERO = Duration()


def _apply(timestamp: datetime.date, duration: Duration, sign: int) -> datetime.date:
    if not isinstance(timestamp, datetime.date):
        raise TypeError(f"expected timestamp to be a date or datetime, not {type(timestamp).__name__}")
    for unit in _UNITS:
        quantity = getattr(duration, unit)
        if quantity:
            timestamp = timestamp + relativedelta(**{unit: sign * quantity})
    return timestamp


def add(timestamp: datetime.date, duration: Duration) -> datetime.date:
    """Apply a :py:class:`Duration` to a timestamp, one unit at a time

    Units are applied from years down to seconds, skipping zero components.
    Month and year steps that land on a missing day are clamped to the last
    day of the month. A `date` is promoted to a `datetime` when the duration
    carries hours, minutes or seconds.

    :raises: `ValueError` or `OverflowError` when the result leaves the range of
        :py:mod:`datetime`
    """
    return _apply(timestamp, duration, 1)


def subtract(timestamp: datetime.date, duration: Duration) -> datetime.date:
    """Reverse of :py:func:`add`: each unit is applied negated, in the same order"""
    return _apply(timestamp, duration, -1)
