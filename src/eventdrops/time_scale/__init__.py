"""Granularity detection and refinement for a visible time window."""

from eventdrops.time_scale.calendar import CalendarUnit, calendar_unit_for
from eventdrops.time_scale.granularity import (
    BUCKET_SCALE_MAP,
    HEATMAP_GRANULARITIES,
    REFINEMENT_HIERARCHY,
    Granularity,
)
from eventdrops.time_scale.instant import InvalidDomainError, TimeDomain, coerce_instant, validate_domain
from eventdrops.time_scale.refiner import BucketScaleRefiner, bucket_width
from eventdrops.time_scale.resolver import TimeScaleResolver, resolve_tick_count
from eventdrops.time_scale.scale import PixelScale, TimeScale
from eventdrops.time_scale.ticks import TickOracle, time_ticks

__all__ = [
    "BUCKET_SCALE_MAP",
    "BucketScaleRefiner",
    "CalendarUnit",
    "Granularity",
    "HEATMAP_GRANULARITIES",
    "InvalidDomainError",
    "PixelScale",
    "REFINEMENT_HIERARCHY",
    "TickOracle",
    "TimeDomain",
    "TimeScale",
    "TimeScaleResolver",
    "bucket_width",
    "calendar_unit_for",
    "coerce_instant",
    "resolve_tick_count",
    "time_ticks",
    "validate_domain",
]
