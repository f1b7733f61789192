"""
eventdrops: adaptive time bucketing for event timelines.

This package provides:
- TimeScaleResolver: the calendar granularity an axis currently displays
- BucketScaleRefiner: granularity adjusted to bucket pixel-width bounds
- aggregate_events / normalize_intensity: sparse buckets with per-row intensity
- compute_heatmap: the full pass used by a chart renderer
- Logging utilities for library and application use

For logging configuration in standalone scripts:
    ```python
    from eventdrops.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library, logging is handled by the parent application's
configuration.
"""

import logging

from eventdrops.utils.logging import configure_logging, get_logger

from eventdrops.heatmap import (
    Bucket,
    BucketSize,
    Diagnostic,
    HeatmapConfig,
    HeatmapResult,
    aggregate_events,
    compute_heatmap,
    get_time_interval,
    get_time_scale,
    normalize_intensity,
    should_use_heatmap,
)
from eventdrops.time_scale import (
    BucketScaleRefiner,
    Granularity,
    InvalidDomainError,
    TimeDomain,
    TimeScale,
    TimeScaleResolver,
)

# Ensure the eventdrops logger has a NullHandler so logs don't propagate to
# root when no application has configured logging.
_logger = logging.getLogger("eventdrops")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "Bucket",
    "BucketScaleRefiner",
    "BucketSize",
    "Diagnostic",
    "Granularity",
    "HeatmapConfig",
    "HeatmapResult",
    "InvalidDomainError",
    "TimeDomain",
    "TimeScale",
    "TimeScaleResolver",
    "aggregate_events",
    "compute_heatmap",
    "configure_logging",
    "get_logger",
    "get_time_interval",
    "get_time_scale",
    "normalize_intensity",
    "should_use_heatmap",
]

__version__ = "0.1.0"
