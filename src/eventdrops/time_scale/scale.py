"""Linear time -> pixel scale.

:class:`TimeScale` plays the role of the axis scale in the rendering layer:
it maps instants to pixel offsets, exposes its domain and produces the same
ticks the axis draws. The refiner only needs the mapping (:class:`PixelScale`);
the resolver only needs the ticks (:class:`~eventdrops.time_scale.ticks.TickOracle`).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol, Sequence

from eventdrops.time_scale.calendar import shift_instant
from eventdrops.time_scale.instant import TimeDomain, coerce_instant, milliseconds_between, validate_domain
from eventdrops.time_scale.ticks import DEFAULT_TICK_COUNT, time_ticks


class PixelScale(Protocol):
    """Monotonic instant -> pixel offset mapping."""

    def __call__(self, instant: datetime) -> float: ...


@dataclass
class TimeScale:
    """Linear scale from a time domain to a pixel range.

    The domain is stored as given so that a malformed domain can flow through
    to validation (which reports it) instead of failing here.

    Attributes:
        domain: (start, end) values, normally instants.
        range: (left, right) pixel offsets.
    """

    domain: Sequence[Any]
    range: tuple[float, float] = (0.0, 1.0)

    def valid_domain(self) -> TimeDomain:
        """Return the validated domain (raises InvalidDomainError)."""
        return validate_domain(self.domain)

    def __call__(self, instant: Any) -> float:
        d = self.valid_domain()
        t = coerce_instant(instant)
        if t is None:
            raise ValueError(f"not an instant: {instant!r}")
        r0, r1 = self.range
        return r0 + milliseconds_between(d.start, t) / d.duration_ms * (r1 - r0)

    def invert(self, pixel: float) -> datetime:
        """Pixel offset -> instant, truncated to milliseconds.

        A zero-width range maps every pixel to the domain start.
        """
        d = self.valid_domain()
        r0, r1 = self.range
        if r0 == r1:
            return d.start
        ms = (pixel - r0) / (r1 - r0) * d.duration_ms
        return shift_instant(d.start, timedelta(milliseconds=int(ms)))

    def ticks(self, count: int = DEFAULT_TICK_COUNT) -> list[datetime]:
        d = self.valid_domain()
        return time_ticks(d.start, d.end, count)

    @property
    def width(self) -> float:
        return abs(self.range[1] - self.range[0])
