"""Adjust a bucket granularity to pixel-width constraints.

The width of a representative bucket (the one containing the domain start)
is measured through the pixel scale. If it is narrower than the minimum the
refiner walks toward coarser granularities; if wider than the maximum it
walks toward finer ones. When the hierarchy runs out the extreme granularity
is adopted.
"""

from __future__ import annotations

from typing import Any, Optional

from eventdrops.time_scale.calendar import calendar_unit_for
from eventdrops.time_scale.granularity import DEFAULT_GRANULARITY, REFINEMENT_HIERARCHY, Granularity
from eventdrops.time_scale.instant import InvalidDomainError, validate_domain
from eventdrops.time_scale.scale import PixelScale
from eventdrops.utils.logging import get_logger

logger = get_logger(__name__)


def bucket_width(domain: Any, granularity: Granularity, pixel_scale: PixelScale) -> float:
    """Pixel width of the bucket containing the domain start (>= 0).

    A malformed domain measures as 0.
    """
    try:
        d = validate_domain(domain)
    except InvalidDomainError:
        return 0.0
    unit = calendar_unit_for(granularity)
    bucket_start = unit.floor(d.start)
    bucket_end = unit.offset(bucket_start, 1)
    return max(0.0, pixel_scale(bucket_end) - pixel_scale(bucket_start))


class BucketScaleRefiner:
    """Walks the granularity hierarchy until bucket widths fit the constraints.

    Args:
        pixel_scale: Monotonic instant -> pixel mapping used to measure buckets.
    """

    def __init__(self, pixel_scale: PixelScale) -> None:
        self.pixel_scale = pixel_scale

    def width(self, domain: Any, granularity: Granularity) -> float:
        return bucket_width(domain, granularity, self.pixel_scale)

    def refine(
        self,
        domain: Any,
        granularity: Granularity,
        min_width: Optional[float] = None,
        max_width: Optional[float] = None,
    ) -> Granularity:
        """Return the granularity adjusted to ``min_width`` / ``max_width`` pixels.

        The minimum is applied first (coarser walk), then the maximum (finer
        walk from the original position), each only when its bound is set and
        violated.
        """
        if granularity not in REFINEMENT_HIERARCHY:
            logger.debug("%s is outside the refinement hierarchy, using %s", granularity, DEFAULT_GRANULARITY)
            granularity = DEFAULT_GRANULARITY
        index = REFINEMENT_HIERARCHY.index(granularity)
        refined = granularity
        current_width = self.width(domain, refined)

        if min_width is not None and current_width < min_width:
            for i in range(index + 1, len(REFINEMENT_HIERARCHY)):
                candidate = REFINEMENT_HIERARCHY[i]
                candidate_width = self.width(domain, candidate)
                refined, current_width = candidate, candidate_width
                if candidate_width >= min_width:
                    break

        if max_width is not None and current_width > max_width:
            for i in range(index - 1, -1, -1):
                candidate = REFINEMENT_HIERARCHY[i]
                candidate_width = self.width(domain, candidate)
                refined, current_width = candidate, candidate_width
                if candidate_width <= max_width:
                    break

        if refined is not granularity:
            logger.debug(
                "refined %s -> %s (width %.2fpx, min=%s, max=%s)",
                granularity,
                refined,
                current_width,
                min_width,
                max_width,
            )
        return refined


def refine(
    domain: Any,
    granularity: Granularity,
    constraint: Any,
    pixel_scale: PixelScale,
) -> Granularity:
    """Refine against a constraint object with ``min_width`` / ``max_width``."""
    if constraint is None:
        return granularity
    return BucketScaleRefiner(pixel_scale).refine(
        domain,
        granularity,
        min_width=getattr(constraint, "min_width", None),
        max_width=getattr(constraint, "max_width", None),
    )
