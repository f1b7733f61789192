"""Heatmap configuration.

This module defines the BucketSize and HeatmapConfig dataclasses that carry
the chart options the bucketing engine reads: tick counts per layout
breakpoint and optional bucket pixel-width bounds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from eventdrops.time_scale.ticks import DEFAULT_TICK_COUNT
from eventdrops.utils.logging import get_logger

logger = get_logger(__name__)


def _optional_width(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        width = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number or None, got {value!r}") from e
    if math.isnan(width) or width < 0:
        raise ValueError(f"{name} must be >= 0, got {value!r}")
    return width


@dataclass(frozen=True)
class BucketSize:
    """Pixel-width bounds for one bucket; None means unbounded on that side."""

    min_width: Optional[float] = None
    max_width: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_width", _optional_width(self.min_width, "min_width"))
        object.__setattr__(self, "max_width", _optional_width(self.max_width, "max_width"))
        if (
            self.min_width is not None
            and self.max_width is not None
            and self.min_width > self.max_width
        ):
            # Both bounds are applied independently, so this is allowed.
            logger.info("bucket min_width %s exceeds max_width %s", self.min_width, self.max_width)

    @property
    def is_constrained(self) -> bool:
        return self.min_width is not None or self.max_width is not None

    def to_dict(self) -> dict[str, Any]:
        return {"min_width": self.min_width, "max_width": self.max_width}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["BucketSize"]:
        """Build from a dict with snake_case or camelCase keys; None stays None."""
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"bucket_size must be a dict or None, got {type(data).__name__}")
        return cls(
            min_width=data.get("min_width", data.get("minWidth")),
            max_width=data.get("max_width", data.get("maxWidth")),
        )


@dataclass
class HeatmapConfig:
    """Options read by the bucketing pipeline.

    Attributes:
        number_displayed_ticks: Breakpoint label -> axis tick count,
            e.g. ``{"small": 3, "medium": 5, "large": 8, "extra": 12}``.
        bucket_size: Optional bucket pixel-width bounds used for refinement.
        default_tick_count: Tick count when the breakpoint is not configured.
    """

    number_displayed_ticks: dict[str, int] = field(default_factory=dict)
    bucket_size: Optional[BucketSize] = None
    default_tick_count: int = DEFAULT_TICK_COUNT

    def __post_init__(self) -> None:
        for label, count in self.number_displayed_ticks.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise ValueError(f"tick count for breakpoint {label!r} must be an int >= 0, got {count!r}")
        if isinstance(self.default_tick_count, bool) or not isinstance(self.default_tick_count, int):
            raise ValueError(f"default_tick_count must be an int, got {self.default_tick_count!r}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize HeatmapConfig to a plain dictionary."""
        return {
            "number_displayed_ticks": dict(self.number_displayed_ticks),
            "bucket_size": self.bucket_size.to_dict() if self.bucket_size is not None else None,
            "default_tick_count": self.default_tick_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HeatmapConfig":
        """Deserialize HeatmapConfig from a dictionary.

        Chart-style camelCase keys (``numberDisplayedTicks``, ``bucketSize``)
        are accepted as well as the snake_case keys written by to_dict().

        Raises:
            ValueError: If a tick count or width is invalid.
        """
        ticks = data.get("number_displayed_ticks", data.get("numberDisplayedTicks"))
        if not isinstance(ticks, dict):
            ticks = {}
        bucket_size = data.get("bucket_size", data.get("bucketSize"))
        return cls(
            number_displayed_ticks=dict(ticks),
            bucket_size=BucketSize.from_dict(bucket_size),
            default_tick_count=data.get("default_tick_count", DEFAULT_TICK_COUNT),
        )
