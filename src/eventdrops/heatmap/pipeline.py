"""Bucketing pipeline used by the chart renderer.

Composes the resolver, refiner, aggregator and normalizer for an axis scale
and a set of rows. This is the boundary the renderer calls on every zoom,
resize or data change, so nothing here raises for a bad domain or bad event
instants: problems come back as :class:`Diagnostic` values (and are logged at
WARNING) alongside a default granularity or empty buckets.

Rows are the chart's drop lines: mappings, labelled Series or objects with a
``data`` sequence of events (list, ndarray, Series) and an optional ``name``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import pandas as pd

from eventdrops.heatmap.aggregator import Bucket, InstantAccessor, aggregate_events
from eventdrops.heatmap.config import HeatmapConfig
from eventdrops.heatmap.intensity import max_intensity, normalize_intensity
from eventdrops.time_scale.calendar import BaseUnit, calendar_unit_for
from eventdrops.time_scale.granularity import (
    DEFAULT_GRANULARITY,
    HEATMAP_GRANULARITIES,
    Granularity,
    bucket_granularity_for,
)
from eventdrops.time_scale.instant import InvalidDomainError, TimeDomain, validate_domain
from eventdrops.time_scale.refiner import BucketScaleRefiner
from eventdrops.time_scale.resolver import TimeScaleResolver, resolve_tick_count
from eventdrops.time_scale.ticks import TickOracle
from eventdrops.utils.logging import get_logger

logger = get_logger(__name__)

INVALID_DOMAIN = "invalid_domain"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while bucketing."""

    code: str
    message: str
    row: Optional[int] = None


@dataclass(frozen=True)
class TimeScaleDecision:
    """Granularity chosen for the current axis state.

    Attributes:
        granularity: Bucket granularity after refinement.
        tick_granularity: Granularity of the displayed ticks, None when the
            domain was malformed.
        tick_count: Tick count requested from the tick generator.
        diagnostics: Problems found; non-empty means defaults were used.
    """

    granularity: Granularity
    tick_granularity: Optional[Granularity]
    tick_count: int
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def use_heatmap(self) -> bool:
        return self.ok and self.granularity in HEATMAP_GRANULARITIES


@dataclass(frozen=True)
class RowBuckets:
    """Normalized buckets for one row."""

    index: int
    name: Optional[str]
    buckets: list[Bucket] = field(default_factory=list)

    @property
    def max_count(self) -> int:
        return max_intensity(self.buckets)

    @property
    def total_count(self) -> int:
        return sum(b.count for b in self.buckets)


@dataclass(frozen=True)
class HeatmapResult:
    """Output of one bucketing pass over all rows."""

    granularity: Granularity
    use_heatmap: bool
    rows: list[RowBuckets] = field(default_factory=list)
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def _report(diagnostic: Diagnostic) -> Diagnostic:
    logger.warning("[%s] %s", diagnostic.code, diagnostic.message)
    return diagnostic


def _scale_domain(scale: Any) -> Any:
    """The scale's domain, whether exposed as an attribute or a method."""
    domain = getattr(scale, "domain", None)
    return domain() if callable(domain) else domain


def _scale_tick_oracle(scale: Any) -> Optional[TickOracle]:
    """Use the scale's own ticks() so buckets align with the drawn axis."""
    ticks = getattr(scale, "ticks", None)
    if not callable(ticks):
        return None
    return lambda start, end, count: ticks(count)


def _row_field(row: Any, key: str) -> Any:
    """Read ``key`` from a mapping, a labelled Series or an object row."""
    if row is None:
        return None
    if isinstance(row, (Mapping, pd.Series)):
        return row.get(key)
    return getattr(row, key, None)


def _row_name(row: Any) -> Optional[str]:
    name = _row_field(row, "name")
    return None if name is None else str(name)


def get_time_scale(
    scale: Any,
    config: Optional[HeatmapConfig] = None,
    breakpoint_label: Optional[str] = None,
    tick_oracle: Optional[TickOracle] = None,
) -> TimeScaleDecision:
    """Decide the bucket granularity for the axis scale's current domain.

    Args:
        scale: Axis scale: exposes ``domain``, maps instants to pixels when
            called, and usually provides ``ticks(count)``.
        config: Tick counts per breakpoint and optional bucket size bounds.
        breakpoint_label: Current layout breakpoint (e.g. "medium").
        tick_oracle: Tick generator; defaults to the scale's ``ticks``.

    Returns:
        The decision. A malformed domain gives ``days`` and a diagnostic.
    """
    config = config or HeatmapConfig()
    tick_count = resolve_tick_count(
        config.number_displayed_ticks, breakpoint_label, config.default_tick_count
    )
    resolver = TimeScaleResolver(tick_oracle or _scale_tick_oracle(scale))
    domain = _scale_domain(scale)

    try:
        tick_granularity = resolver.detect_tick_scale(domain, tick_count)
    except InvalidDomainError as e:
        diagnostic = _report(Diagnostic(INVALID_DOMAIN, f"{e}; using {DEFAULT_GRANULARITY}"))
        return TimeScaleDecision(DEFAULT_GRANULARITY, None, tick_count, (diagnostic,))

    granularity = bucket_granularity_for(tick_granularity)
    bucket_size = config.bucket_size
    if bucket_size is not None and bucket_size.is_constrained:
        granularity = BucketScaleRefiner(scale).refine(
            domain,
            granularity,
            min_width=bucket_size.min_width,
            max_width=bucket_size.max_width,
        )
    return TimeScaleDecision(granularity, tick_granularity, tick_count)


def should_use_heatmap(
    scale: Any,
    config: Optional[HeatmapConfig] = None,
    breakpoint_label: Optional[str] = None,
    tick_oracle: Optional[TickOracle] = None,
) -> bool:
    """True when rows should render as buckets rather than individual events.

    Buckets are used at ``days`` and coarser; a malformed domain gives False.
    """
    return get_time_scale(scale, config, breakpoint_label, tick_oracle).use_heatmap


def get_time_interval(
    scale: Any,
    config: Optional[HeatmapConfig] = None,
    breakpoint_label: Optional[str] = None,
    tick_oracle: Optional[TickOracle] = None,
) -> BaseUnit:
    """Calendar unit for bucketing (the day unit when the domain is malformed)."""
    return calendar_unit_for(get_time_scale(scale, config, breakpoint_label, tick_oracle).granularity)


def _bucket_row(
    domain: TimeDomain,
    row: Any,
    granularity: Granularity,
    instant_of: Optional[InstantAccessor],
) -> list[Bucket]:
    # data may be an ndarray or Series; only None means no data
    data = _row_field(row, "data")
    if data is None:
        return []
    return normalize_intensity(aggregate_events(domain, granularity, data, instant_of))


def get_heatmap_bucket_data(
    scale: Any,
    row: Any,
    granularity: Granularity,
    instant_of: Optional[InstantAccessor] = None,
) -> list[Bucket]:
    """Normalized buckets for a single row (empty for a row without data).

    A malformed domain is logged and yields no buckets.
    """
    try:
        domain = validate_domain(_scale_domain(scale))
    except InvalidDomainError as e:
        _report(Diagnostic(INVALID_DOMAIN, f"{e}; returning empty buckets"))
        return []
    return _bucket_row(domain, row, granularity, instant_of)


def compute_heatmap(
    scale: Any,
    rows: Optional[Iterable[Any]],
    config: Optional[HeatmapConfig] = None,
    breakpoint_label: Optional[str] = None,
    instant_of: Optional[InstantAccessor] = None,
    tick_oracle: Optional[TickOracle] = None,
) -> HeatmapResult:
    """Run the full pass: decide the granularity, then bucket and normalize each row.

    Rows are processed independently; each row's intensities are relative to
    its own maximum count.
    """
    decision = get_time_scale(scale, config, breakpoint_label, tick_oracle)
    row_list = list(rows) if rows is not None else []

    if not decision.ok:
        empty = [RowBuckets(i, _row_name(r)) for i, r in enumerate(row_list)]
        return HeatmapResult(decision.granularity, False, empty, decision.diagnostics)

    domain = validate_domain(_scale_domain(scale))
    out = [
        RowBuckets(i, _row_name(r), _bucket_row(domain, r, decision.granularity, instant_of))
        for i, r in enumerate(row_list)
    ]
    logger.debug(
        "%d rows bucketed at %s, %d buckets",
        len(out),
        decision.granularity,
        sum(len(r.buckets) for r in out),
    )
    return HeatmapResult(decision.granularity, decision.use_heatmap, out, decision.diagnostics)
