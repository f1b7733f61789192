"""Per-row intensity normalization.

Each bucket's intensity is its count divided by the largest count in the same
row, so every row is scaled against its own distribution and never against
other rows.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from eventdrops.heatmap.aggregator import Bucket


def max_intensity(buckets: Sequence[Bucket]) -> int:
    """Largest bucket count in a row, or 1 when the row is empty or all zero."""
    if len(buckets) == 0:
        return 1
    max_count = int(np.max(np.asarray([b.count for b in buckets], dtype=np.int64)))
    return max_count if max_count > 0 else 1


def normalize_intensity(buckets: Sequence[Bucket]) -> list[Bucket]:
    """Return copies of ``buckets`` with intensity = count / row maximum in [0, 1].

    An empty row stays empty.
    """
    if len(buckets) == 0:
        return []
    max_count = max_intensity(buckets)
    counts = np.asarray([b.count for b in buckets], dtype=float)
    intensities = np.clip(counts / max_count, 0.0, 1.0)
    return [b.with_intensity(float(i)) for b, i in zip(buckets, intensities)]
