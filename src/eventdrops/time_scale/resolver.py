"""Infer the calendar granularity the axis currently displays.

The resolver samples ticks from the axis' own tick generator, finds the
calendar unit whose whole-unit spacing best explains the distance between the
first two ticks, and maps that tick granularity to a bucket granularity one
level finer. When the tick generator returns fewer than two ticks it falls
back to classifying the domain duration.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Sequence

from eventdrops.time_scale.calendar import (
    DAY,
    HOUR,
    MINUTE,
    MONTH,
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    SECOND,
    WEEK,
    YEAR,
)
from eventdrops.time_scale.granularity import DEFAULT_GRANULARITY, Granularity, bucket_granularity_for
from eventdrops.time_scale.instant import coerce_instant, milliseconds_between, validate_domain
from eventdrops.time_scale.ticks import DEFAULT_TICK_COUNT, TickOracle, time_ticks
from eventdrops.utils.logging import get_logger

logger = get_logger(__name__)

# Year length used by the duration heuristic.
MS_PER_JULIAN_YEAR = 365.25 * MS_PER_DAY


def resolve_tick_count(
    number_displayed_ticks: Optional[Mapping[str, int]] = None,
    breakpoint_label: Optional[str] = None,
    default: int = DEFAULT_TICK_COUNT,
) -> int:
    """Tick count for the current breakpoint, or ``default`` when not configured."""
    if number_displayed_ticks and breakpoint_label and breakpoint_label in number_displayed_ticks:
        value = number_displayed_ticks[breakpoint_label]
        if value is not None:
            return int(value)
    return default


def detect_tick_scale_from_duration(duration_ms: float) -> Granularity:
    """Classify a domain duration (ms) into the granularity an axis would show."""
    duration_days = duration_ms / MS_PER_DAY
    duration_years = duration_ms / MS_PER_JULIAN_YEAR

    if duration_years >= 1000:
        return Granularity.MILLENNIUM
    if duration_years >= 10:
        return Granularity.DECADES
    if duration_days >= 365:
        return Granularity.YEARS
    if duration_days >= 30:
        return Granularity.MONTHS
    if duration_days >= 7:
        return Granularity.WEEKS
    if duration_days >= 1:
        return Granularity.DAYS
    if duration_ms >= MS_PER_HOUR:
        return Granularity.HOURS
    if duration_ms >= MS_PER_MINUTE:
        return Granularity.MINUTES
    if duration_ms >= MS_PER_SECOND:
        return Granularity.SECONDS
    return Granularity.MILLISECONDS


def _tick_candidates(tick1: datetime, tick2: datetime) -> list[tuple[Granularity, float]]:
    """(granularity, expected duration ms) pairs, coarsest first."""
    candidates: list[tuple[Granularity, float]] = []

    year_count = YEAR.count(tick1, tick2)
    year_duration = milliseconds_between(tick1, YEAR.offset(tick1, year_count))
    if year_count >= 1000:
        candidates.append((Granularity.MILLENNIUM, year_duration))
    if year_count >= 10:
        candidates.append((Granularity.DECADES, year_duration))
    if year_count >= 1:
        candidates.append((Granularity.YEARS, year_duration))

    for granularity, unit in (
        (Granularity.MONTHS, MONTH),
        (Granularity.WEEKS, WEEK),
        (Granularity.DAYS, DAY),
        (Granularity.HOURS, HOUR),
        (Granularity.MINUTES, MINUTE),
        (Granularity.SECONDS, SECOND),
    ):
        count = unit.count(tick1, tick2)
        if count >= 1:
            candidates.append((granularity, milliseconds_between(tick1, unit.offset(tick1, count))))

    candidates.append((Granularity.MILLISECONDS, milliseconds_between(tick1, tick2)))
    return candidates


def detect_tick_scale_from_ticks(sample_ticks: Optional[Sequence[Any]]) -> Granularity:
    """Closest calendar unit to the spacing between the first two ticks.

    Ties keep the earlier (coarser) candidate. Fewer than two usable ticks
    yields the default granularity.
    """
    if not sample_ticks or len(sample_ticks) < 2:
        return DEFAULT_GRANULARITY
    tick1 = coerce_instant(sample_ticks[0])
    tick2 = coerce_instant(sample_ticks[1])
    if tick1 is None or tick2 is None:
        return DEFAULT_GRANULARITY

    tick_duration = milliseconds_between(tick1, tick2)
    best = Granularity.MILLISECONDS
    min_difference = float("inf")
    for granularity, expected in _tick_candidates(tick1, tick2):
        difference = abs(expected - tick_duration)
        if difference < min_difference:
            min_difference = difference
            best = granularity
    return best


class TimeScaleResolver:
    """Decides the bucket granularity for a domain from the axis' ticks.

    Args:
        tick_oracle: Tick generator shared with the axis. Defaults to
            :func:`~eventdrops.time_scale.ticks.time_ticks`.
    """

    def __init__(self, tick_oracle: Optional[TickOracle] = None) -> None:
        self.tick_oracle: TickOracle = tick_oracle or time_ticks

    def detect_tick_scale(self, domain: Any, tick_count_hint: Optional[int] = None) -> Granularity:
        """Granularity of the ticks the axis renders for ``domain``.

        Raises:
            InvalidDomainError: If ``domain`` is malformed.
        """
        d = validate_domain(domain)
        count = DEFAULT_TICK_COUNT if tick_count_hint is None else int(tick_count_hint)
        sample_ticks = list(self.tick_oracle(d.start, d.end, count) or [])

        if len(sample_ticks) < 2:
            tick_scale = detect_tick_scale_from_duration(d.duration_ms)
            logger.debug("%d sample ticks, duration heuristic -> %s", len(sample_ticks), tick_scale)
        else:
            tick_scale = detect_tick_scale_from_ticks(sample_ticks)
            logger.debug("ticks %s, %s -> %s", sample_ticks[0], sample_ticks[1], tick_scale)
        return tick_scale

    def resolve(self, domain: Any, tick_count_hint: Optional[int] = None) -> Granularity:
        """Bucket granularity, one level finer than the displayed ticks.

        Raises:
            InvalidDomainError: If ``domain`` is malformed; callers substitute
                ``Granularity.DAYS``.
        """
        return bucket_granularity_for(self.detect_tick_scale(domain, tick_count_hint))


def resolve(
    domain: Any,
    tick_count_hint: Optional[int] = None,
    tick_oracle: Optional[TickOracle] = None,
) -> Granularity:
    """Module-level shortcut for ``TimeScaleResolver(tick_oracle).resolve(...)``."""
    return TimeScaleResolver(tick_oracle).resolve(domain, tick_count_hint)
