"""Tests for per-row intensity normalization."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from eventdrops.heatmap.aggregator import Bucket, aggregate_events
from eventdrops.heatmap.intensity import max_intensity, normalize_intensity
from eventdrops.time_scale.granularity import Granularity


def make_buckets(*counts: int) -> list[Bucket]:
    start = datetime(2020, 1, 1)
    return [Bucket(start + timedelta(days=i), c, tuple(range(c))) for i, c in enumerate(counts)]


def test_intensity_is_count_over_row_max() -> None:
    normalized = normalize_intensity(make_buckets(4, 1, 2))
    assert [b.intensity for b in normalized] == pytest.approx([1.0, 0.25, 0.5])


def test_max_bucket_has_intensity_one() -> None:
    normalized = normalize_intensity(make_buckets(3, 7, 7, 2))
    assert max(b.intensity for b in normalized) == 1.0
    assert all(0.0 <= b.intensity <= 1.0 for b in normalized)


def test_single_bucket_is_full_intensity() -> None:
    assert normalize_intensity(make_buckets(5))[0].intensity == 1.0


def test_empty_row_stays_empty() -> None:
    assert normalize_intensity([]) == []
    assert max_intensity([]) == 1


def test_normalize_returns_copies() -> None:
    buckets = make_buckets(2, 1)
    normalized = normalize_intensity(buckets)
    assert [b.intensity for b in buckets] == [0.0, 0.0]
    assert [b.members for b in normalized] == [b.members for b in buckets]
    assert [b.start for b in normalized] == [b.start for b in buckets]


def test_rows_are_normalized_independently() -> None:
    busy = normalize_intensity(make_buckets(100, 50))
    quiet = normalize_intensity(make_buckets(2, 1))
    assert [b.intensity for b in busy] == [b.intensity for b in quiet]


def test_max_intensity() -> None:
    assert max_intensity(make_buckets(3, 9, 1)) == 9
    assert max_intensity([Bucket(datetime(2020, 1, 1), 0)]) == 1


def test_aggregate_then_normalize_one_week() -> None:
    week = (datetime(2020, 1, 1), datetime(2020, 1, 8))
    events = [{"date": datetime(2020, 1, 2)}, {"date": datetime(2020, 1, 2)}, {"date": datetime(2020, 1, 5)}]
    normalized = normalize_intensity(aggregate_events(week, Granularity.DAYS, events))
    assert [(b.start, b.count) for b in normalized] == [(datetime(2020, 1, 2), 2), (datetime(2020, 1, 5), 1)]
    assert [b.intensity for b in normalized] == [1.0, 0.5]

    assert normalize_intensity(aggregate_events(week, Granularity.DAYS, [])) == []
