"""Event bucketing and per-row intensity for the heatmap view."""

from eventdrops.heatmap.aggregator import Bucket, aggregate_events, aggregate_frame, buckets_to_frame
from eventdrops.heatmap.config import BucketSize, HeatmapConfig
from eventdrops.heatmap.intensity import max_intensity, normalize_intensity
from eventdrops.heatmap.pipeline import (
    Diagnostic,
    HeatmapResult,
    RowBuckets,
    TimeScaleDecision,
    compute_heatmap,
    get_heatmap_bucket_data,
    get_time_interval,
    get_time_scale,
    should_use_heatmap,
)

__all__ = [
    "Bucket",
    "BucketSize",
    "Diagnostic",
    "HeatmapConfig",
    "HeatmapResult",
    "RowBuckets",
    "TimeScaleDecision",
    "aggregate_events",
    "aggregate_frame",
    "buckets_to_frame",
    "compute_heatmap",
    "get_heatmap_bucket_data",
    "get_time_interval",
    "get_time_scale",
    "max_intensity",
    "normalize_intensity",
    "should_use_heatmap",
]
