"""Calendar arithmetic for each granularity.

A :class:`CalendarUnit` floors, ceils, offsets and counts instants on a
calendar grid. Fixed-length units (milliseconds up to weeks) work on epoch
milliseconds; months and years work on calendar fields so that month and
leap-year lengths are respected.

Semantics follow the interval primitives of common axis libraries:

- ``ceil(t) == floor(offset(floor(t - 1ms), 1))``, so an aligned instant is
  its own ceiling.
- ``count(a, b)`` is the number of unit boundaries between ``floor(a)`` and
  ``floor(b)``.
- ``range(start, stop, step)`` lists the boundaries in ``[ceil(start), stop)``.
- ``every(step)`` returns a coarser unit whose boundaries are a subset of this
  unit's boundaries (e.g. ``HOUR.every(3)`` = 00:00, 03:00, ...).

Results that would leave the representable ``datetime`` range are clamped to
its bounds.
"""

from __future__ import annotations

import calendar as _calendar
import math
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, runtime_checkable

from eventdrops.time_scale.granularity import Granularity
from eventdrops.time_scale.instant import ONE_MILLISECOND

EPOCH = datetime(1970, 1, 1)
MIN_INSTANT = datetime.min
MAX_INSTANT = datetime.max.replace(microsecond=999000)

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
MS_PER_WEEK = 7 * MS_PER_DAY


@runtime_checkable
class CalendarUnit(Protocol):
    """Calendar grid used to floor instants into buckets."""

    name: str

    def floor(self, t: datetime) -> datetime: ...

    def ceil(self, t: datetime) -> datetime: ...

    def offset(self, t: datetime, n: int) -> datetime: ...

    def count(self, a: datetime, b: datetime) -> int: ...


def shift_instant(t: datetime, delta: timedelta) -> datetime:
    try:
        return t + delta
    except OverflowError:
        return MAX_INSTANT if delta > timedelta(0) else MIN_INSTANT


def to_epoch_ms(t: datetime) -> int:
    return (t - EPOCH) // ONE_MILLISECOND


def from_epoch_ms(ms: int) -> datetime:
    return shift_instant(EPOCH, timedelta(milliseconds=ms))


class BaseUnit:
    """Shared ceil/range/every behavior; subclasses provide floor/offset/count."""

    name: str = "unit"

    def floor(self, t: datetime) -> datetime:
        raise NotImplementedError

    def offset(self, t: datetime, n: int) -> datetime:
        raise NotImplementedError

    def count(self, a: datetime, b: datetime) -> int:
        raise NotImplementedError

    def ceil(self, t: datetime) -> datetime:
        d = self.floor(shift_instant(t, -ONE_MILLISECOND))
        return self.floor(self.offset(d, 1))

    def range(self, start: datetime, stop: datetime, step: int = 1) -> list[datetime]:
        """Unit boundaries in [ceil(start), stop), every ``step`` units."""
        out: list[datetime] = []
        current = self.ceil(start)
        step = int(step)
        if not (current < stop) or step <= 0:
            return out
        while True:
            previous = current
            out.append(previous)
            current = self.floor(self.offset(current, step))
            if not (previous < current < stop):
                break
        return out

    def every(self, step: float) -> Optional["BaseUnit"]:
        """Unit whose boundaries are every ``step``-th boundary of this one."""
        if not math.isfinite(step) or step <= 0:
            return None
        step = int(math.floor(step))
        if step <= 1:
            return self
        return self._every(step)

    def _every(self, step: int) -> "BaseUnit":
        return FilteredUnit(self, lambda d: self.count(EPOCH, d) % step == 0, f"{self.name}*{step}")

    def __repr__(self) -> str:
        return f"<CalendarUnit {self.name}>"


class FixedUnit(BaseUnit):
    """Unit of constant length, aligned to ``anchor_ms`` past the epoch."""

    def __init__(
        self,
        name: str,
        size_ms: int,
        *,
        anchor_ms: int = 0,
        field: Optional[Callable[[datetime], int]] = None,
    ) -> None:
        self.name = name
        self.size_ms = size_ms
        self.anchor_ms = anchor_ms
        self._field = field

    def floor(self, t: datetime) -> datetime:
        ms = to_epoch_ms(t)
        return from_epoch_ms(ms - (ms - self.anchor_ms) % self.size_ms)

    def offset(self, t: datetime, n: int) -> datetime:
        return shift_instant(t, timedelta(milliseconds=self.size_ms * int(n)))

    def count(self, a: datetime, b: datetime) -> int:
        return (to_epoch_ms(self.floor(b)) - to_epoch_ms(self.floor(a))) // self.size_ms

    def _every(self, step: int) -> BaseUnit:
        if self.size_ms == 1:
            return FixedUnit(f"{self.name}*{step}", step)
        if self._field is None:
            return super()._every(step)
        field = self._field
        return FilteredUnit(self, lambda d: field(d) % step == 0, f"{self.name}*{step}")


class MonthUnit(BaseUnit):
    """Calendar months; offsets clamp the day to the target month's length."""

    name = "month"

    def floor(self, t: datetime) -> datetime:
        return datetime(t.year, t.month, 1)

    def offset(self, t: datetime, n: int) -> datetime:
        year, month0 = divmod(t.year * 12 + (t.month - 1) + int(n), 12)
        if year < MIN_INSTANT.year:
            return MIN_INSTANT
        if year > MAX_INSTANT.year:
            return MAX_INSTANT
        day = min(t.day, _calendar.monthrange(year, month0 + 1)[1])
        return t.replace(year=year, month=month0 + 1, day=day)

    def count(self, a: datetime, b: datetime) -> int:
        return (b.year - a.year) * 12 + (b.month - a.month)

    def _every(self, step: int) -> BaseUnit:
        return FilteredUnit(self, lambda d: (d.month - 1) % step == 0, f"{self.name}*{step}")


class YearUnit(BaseUnit):
    """Calendar years, or multiples of ``step`` years aligned to year 0."""

    def __init__(self, step: int = 1, name: str = "year") -> None:
        self.step = step
        self.name = name

    def floor(self, t: datetime) -> datetime:
        year = t.year - t.year % self.step
        if year < MIN_INSTANT.year:
            return MIN_INSTANT
        return datetime(year, 1, 1)

    def offset(self, t: datetime, n: int) -> datetime:
        year = t.year + int(n) * self.step
        if year < MIN_INSTANT.year:
            return MIN_INSTANT
        if year > MAX_INSTANT.year:
            return MAX_INSTANT
        day = min(t.day, _calendar.monthrange(year, t.month)[1])
        return t.replace(year=year, day=day)

    def count(self, a: datetime, b: datetime) -> int:
        return (self.floor(b).year - self.floor(a).year) // self.step

    def _every(self, step: int) -> BaseUnit:
        return YearUnit(self.step * step, f"{self.name}*{step}")


class FilteredUnit(BaseUnit):
    """Boundaries of ``base`` for which ``test`` holds."""

    def __init__(self, base: BaseUnit, test: Callable[[datetime], bool], name: str) -> None:
        self.base = base
        self.test = test
        self.name = name

    def floor(self, t: datetime) -> datetime:
        d = self.base.floor(t)
        while not self.test(d) and d > MIN_INSTANT:
            d = self.base.floor(shift_instant(d, -ONE_MILLISECOND))
        return d

    def offset(self, t: datetime, n: int) -> datetime:
        d = t
        n = int(n)
        direction = 1 if n >= 0 else -1
        for _ in range(abs(n)):
            d = self.base.offset(d, direction)
            while not self.test(d) and MIN_INSTANT < d < MAX_INSTANT:
                d = self.base.offset(d, direction)
        return d

    def count(self, a: datetime, b: datetime) -> int:
        lo, hi = self.floor(a), self.floor(b)
        sign = 1
        if hi < lo:
            lo, hi, sign = hi, lo, -1
        n = 0
        while lo < hi:
            lo = self.offset(lo, 1)
            n += 1
        return sign * n


MILLISECOND = FixedUnit("millisecond", 1)
SECOND = FixedUnit("second", MS_PER_SECOND, field=lambda d: d.second)
MINUTE = FixedUnit("minute", MS_PER_MINUTE, field=lambda d: d.minute)
HOUR = FixedUnit("hour", MS_PER_HOUR, field=lambda d: d.hour)
DAY = FixedUnit("day", MS_PER_DAY, field=lambda d: d.day - 1)
# Weeks start on Sunday; 1970-01-04 was the first Sunday after the epoch.
WEEK = FixedUnit("week", MS_PER_WEEK, anchor_ms=3 * MS_PER_DAY)
MONTH = MonthUnit()
YEAR = YearUnit()
DECADE = YearUnit(10, "decade")
MILLENNIUM = YearUnit(1000, "millennium")

_UNITS: dict[Granularity, BaseUnit] = {
    Granularity.MILLISECONDS: MILLISECOND,
    Granularity.SECONDS: SECOND,
    Granularity.MINUTES: MINUTE,
    Granularity.HOURS: HOUR,
    Granularity.DAYS: DAY,
    Granularity.WEEKS: WEEK,
    Granularity.MONTHS: MONTH,
    Granularity.YEARS: YEAR,
    Granularity.DECADES: DECADE,
    Granularity.MILLENNIUM: MILLENNIUM,
}


def calendar_unit_for(granularity: Granularity) -> BaseUnit:
    """Return the calendar unit for a granularity (days for unknown values)."""
    return _UNITS.get(granularity, DAY)
