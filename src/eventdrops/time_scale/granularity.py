"""Calendar granularities and the ordered tables that drive bucketing.

Granularity is a closed enumeration ordered finest to coarsest. The tables in
this module are the single source of truth for hierarchy walks (refiner),
the tick -> bucket mapping (resolver) and the heatmap decision.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class Granularity(str, Enum):
    """Discrete calendar unit used to floor instants into buckets."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"
    DECADES = "decades"
    MILLENNIUM = "millennium"

    @property
    def rank(self) -> int:
        """Position in GRANULARITY_ORDER (0 = finest)."""
        return GRANULARITY_ORDER.index(self)

    def __str__(self) -> str:
        return self.value


# Finest to coarsest.
GRANULARITY_ORDER: tuple[Granularity, ...] = tuple(Granularity)

# Millennium is produced by tick detection but never reached by refinement.
REFINEMENT_HIERARCHY: tuple[Granularity, ...] = (
    Granularity.MILLISECONDS,
    Granularity.SECONDS,
    Granularity.MINUTES,
    Granularity.HOURS,
    Granularity.DAYS,
    Granularity.WEEKS,
    Granularity.MONTHS,
    Granularity.YEARS,
    Granularity.DECADES,
)

# Detected tick granularity -> bucket granularity one level finer.
# milliseconds maps to itself.
BUCKET_SCALE_MAP: dict[Granularity, Granularity] = {
    Granularity.MILLENNIUM: Granularity.DECADES,
    Granularity.DECADES: Granularity.YEARS,
    Granularity.YEARS: Granularity.MONTHS,
    Granularity.MONTHS: Granularity.WEEKS,
    Granularity.WEEKS: Granularity.DAYS,
    Granularity.DAYS: Granularity.HOURS,
    Granularity.HOURS: Granularity.MINUTES,
    Granularity.MINUTES: Granularity.SECONDS,
    Granularity.SECONDS: Granularity.MILLISECONDS,
    Granularity.MILLISECONDS: Granularity.MILLISECONDS,
}

# Granularities rendered as aggregated buckets; finer ones render single events.
HEATMAP_GRANULARITIES: frozenset[Granularity] = frozenset(
    {
        Granularity.DAYS,
        Granularity.WEEKS,
        Granularity.MONTHS,
        Granularity.YEARS,
        Granularity.DECADES,
    }
)

DEFAULT_GRANULARITY = Granularity.DAYS


def bucket_granularity_for(tick_granularity: Granularity) -> Granularity:
    """Map a detected tick granularity to the bucket granularity."""
    return BUCKET_SCALE_MAP.get(tick_granularity, DEFAULT_GRANULARITY)


def parse_granularity(value: Union[str, Granularity, None]) -> Optional[Granularity]:
    """Return the Granularity named by value, or None if it names none."""
    if isinstance(value, Granularity):
        return value
    if value is None:
        return None
    try:
        return Granularity(str(value).strip().lower())
    except ValueError:
        return None
