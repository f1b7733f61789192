"""Axis tick generation.

The resolver infers the displayed granularity from the spacing of sample
ticks, so it must see exactly the ticks the axis renders. :func:`time_ticks`
reproduces the tick rules of the d3 ``scaleTime`` axis: choose the calendar
interval from a fixed table whose length is closest to ``duration / count``,
then list every boundary of that interval inside the domain.

Any callable with the :class:`TickOracle` signature can be injected instead.
"""

from __future__ import annotations

import bisect
import math
from datetime import datetime
from typing import Optional, Protocol, Sequence

from eventdrops.time_scale.calendar import (
    DAY,
    BaseUnit,
    HOUR,
    MILLISECOND,
    MINUTE,
    MONTH,
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    MS_PER_WEEK,
    SECOND,
    WEEK,
    YEAR,
    shift_instant,
    to_epoch_ms,
)
from eventdrops.time_scale.instant import ONE_MILLISECOND, milliseconds_between

DEFAULT_TICK_COUNT = 10

MS_PER_MONTH = 30 * MS_PER_DAY
MS_PER_YEAR = 365 * MS_PER_DAY

# (interval, step, approximate duration in ms), sorted by duration.
TICK_INTERVALS: tuple[tuple[BaseUnit, int, int], ...] = (
    (SECOND, 1, MS_PER_SECOND),
    (SECOND, 5, 5 * MS_PER_SECOND),
    (SECOND, 15, 15 * MS_PER_SECOND),
    (SECOND, 30, 30 * MS_PER_SECOND),
    (MINUTE, 1, MS_PER_MINUTE),
    (MINUTE, 5, 5 * MS_PER_MINUTE),
    (MINUTE, 15, 15 * MS_PER_MINUTE),
    (MINUTE, 30, 30 * MS_PER_MINUTE),
    (HOUR, 1, MS_PER_HOUR),
    (HOUR, 3, 3 * MS_PER_HOUR),
    (HOUR, 6, 6 * MS_PER_HOUR),
    (HOUR, 12, 12 * MS_PER_HOUR),
    (DAY, 1, MS_PER_DAY),
    (DAY, 2, 2 * MS_PER_DAY),
    (WEEK, 1, MS_PER_WEEK),
    (MONTH, 1, MS_PER_MONTH),
    (MONTH, 3, 3 * MS_PER_MONTH),
    (YEAR, 1, MS_PER_YEAR),
)
_TICK_DURATIONS = [duration for _, _, duration in TICK_INTERVALS]

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


class TickOracle(Protocol):
    """Produces the ordered tick instants an axis would draw for a domain."""

    def __call__(self, start: datetime, end: datetime, count: int) -> Sequence[datetime]: ...


def tick_step(start: float, stop: float, count: float) -> float:
    """Nice step (1, 2 or 5 times a power of ten) covering start..stop in ~count steps."""
    step0 = abs(stop - start) / max(0.0, count) if count > 0 else math.inf
    if not math.isfinite(step0) or step0 <= 0:
        return math.nan
    step1 = 10 ** math.floor(math.log10(step0))
    error = step0 / step1
    if error >= _E10:
        step1 *= 10
    elif error >= _E5:
        step1 *= 5
    elif error >= _E2:
        step1 *= 2
    return -step1 if stop < start else step1


def tick_interval(start: datetime, end: datetime, count: int) -> Optional[BaseUnit]:
    """Calendar interval the axis uses between ticks for this domain and count."""
    if count <= 0:
        return None
    target = abs(milliseconds_between(start, end)) / count
    i = bisect.bisect_right(_TICK_DURATIONS, target)
    if i == len(TICK_INTERVALS):
        return YEAR.every(
            tick_step(to_epoch_ms(start) / MS_PER_YEAR, to_epoch_ms(end) / MS_PER_YEAR, count)
        )
    if i == 0:
        step = tick_step(to_epoch_ms(start), to_epoch_ms(end), count)
        return MILLISECOND.every(max(step, 1) if math.isfinite(step) else 1)
    lower, upper = TICK_INTERVALS[i - 1], TICK_INTERVALS[i]
    unit, step, _ = lower if target / lower[2] < upper[2] / target else upper
    return unit.every(step)


def time_ticks(start: datetime, end: datetime, count: int = DEFAULT_TICK_COUNT) -> list[datetime]:
    """Ticks for the domain [start, end], inclusive of end, ordered like the domain."""
    reverse = end < start
    if reverse:
        start, end = end, start
    interval = tick_interval(start, end, count)
    if interval is None:
        return []
    ticks = interval.range(start, shift_instant(end, ONE_MILLISECOND))
    return ticks[::-1] if reverse else ticks
