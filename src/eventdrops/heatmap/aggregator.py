"""Event aggregation into sparse calendar buckets.

Events are grouped by the start of the calendar cell (at the chosen
granularity) that contains them. Only cells that receive at least one event
produce a bucket, and buckets come back ordered by start.

Rules:
  1. Events whose instant is missing or unparsable are dropped silently.
  2. Events outside the half-open domain [start, end) are dropped.
  3. A bucket start must lie in [floor(start), ceil(end)] for the granularity.
  4. Members keep the order in which events were supplied.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from operator import itemgetter
from typing import Any, Callable, Iterable, Optional

import pandas as pd

from eventdrops.time_scale.calendar import calendar_unit_for
from eventdrops.time_scale.granularity import Granularity
from eventdrops.time_scale.instant import InvalidDomainError, coerce_instant, validate_domain
from eventdrops.utils.logging import get_logger

logger = get_logger(__name__)

InstantAccessor = Callable[[Any], Any]

BUCKET_COLUMNS = ["start", "count", "intensity"]


@dataclass(frozen=True)
class Bucket:
    """Events sharing a floored start instant.

    Attributes:
        start: Start of the calendar cell.
        count: Number of member events (>= 1).
        members: Member events in supply order.
        intensity: count relative to the row maximum, in [0, 1].
    """

    start: datetime
    count: int
    members: tuple[Any, ...] = ()
    intensity: float = 0.0

    def with_intensity(self, intensity: float) -> "Bucket":
        return replace(self, intensity=intensity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "count": self.count,
            "members": list(self.members),
            "intensity": self.intensity,
        }


def default_instant_of(event: Any) -> Any:
    """Read ``event["date"]`` / ``event.date`` when present, else the event itself."""
    if isinstance(event, Mapping):
        return event.get("date")
    value = getattr(event, "date", event)
    # datetime.date() and Timestamp.date() are methods, not fields
    return event if callable(value) else value


def _read_instant(event: Any, instant_of: InstantAccessor) -> Optional[datetime]:
    try:
        raw = instant_of(event)
    except (KeyError, AttributeError, IndexError, TypeError, ValueError):
        return None
    return coerce_instant(raw)


def aggregate_events(
    domain: Any,
    granularity: Granularity,
    events: Optional[Iterable[Any]],
    instant_of: Optional[InstantAccessor] = None,
) -> list[Bucket]:
    """Bucket ``events`` at ``granularity`` within ``domain``.

    Args:
        domain: The visible window (TimeDomain or (start, end) sequence).
        granularity: Calendar granularity of the buckets.
        events: Event records for one row. None counts as no events.
        instant_of: Accessor returning an instant-like value for an event.
            Defaults to :func:`default_instant_of`.

    Returns:
        Non-empty buckets sorted by start, with intensity 0.0 (see
        :mod:`eventdrops.heatmap.intensity`). A malformed domain yields no
        buckets.
    """
    try:
        d = validate_domain(domain)
    except InvalidDomainError as e:
        logger.debug("%s, no buckets", e)
        return []
    if events is None:
        return []
    try:
        iterator = iter(events)
    except TypeError:
        logger.debug("events of type %s are not iterable, no buckets", type(events).__name__)
        return []

    accessor = instant_of or default_instant_of
    unit = calendar_unit_for(granularity)
    bucket_start_bound = unit.floor(d.start)
    bucket_end_bound = unit.ceil(d.end)

    members_by_start: dict[datetime, list[Any]] = {}
    n_invalid = 0
    n_outside = 0
    for event in iterator:
        instant = _read_instant(event, accessor)
        if instant is None:
            n_invalid += 1
            continue
        if not d.contains(instant):
            n_outside += 1
            continue
        bucket_start = unit.floor(instant)
        if not bucket_start_bound <= bucket_start <= bucket_end_bound:
            n_outside += 1
            continue
        members_by_start.setdefault(bucket_start, []).append(event)

    buckets = [
        Bucket(start=start, count=len(members), members=tuple(members))
        for start, members in sorted(members_by_start.items(), key=itemgetter(0))
    ]
    logger.debug(
        "%d buckets at %s (%d invalid, %d outside domain)",
        len(buckets),
        granularity,
        n_invalid,
        n_outside,
    )
    return buckets


def aggregate_frame(
    df: pd.DataFrame,
    domain: Any,
    granularity: Granularity,
    time_col: str = "date",
) -> list[Bucket]:
    """Bucket the rows of a DataFrame by ``time_col``.

    Bucket members are the index labels of the rows, in frame order.

    Raises:
        ValueError: If ``time_col`` is not a column of ``df``.
    """
    if time_col not in df.columns:
        raise ValueError(f"df must contain time column {time_col!r}")
    pairs = list(zip(df.index.tolist(), df[time_col].tolist()))
    buckets = aggregate_events(domain, granularity, pairs, instant_of=itemgetter(1))
    return [replace(b, members=tuple(label for label, _ in b.members)) for b in buckets]


def buckets_to_frame(buckets: Iterable[Bucket]) -> pd.DataFrame:
    """Tabular view of buckets with columns start, count, intensity."""
    rows = [(b.start, b.count, b.intensity) for b in buckets]
    df = pd.DataFrame(rows, columns=BUCKET_COLUMNS)
    df["start"] = pd.to_datetime(df["start"])
    df["count"] = df["count"].astype(int)
    df["intensity"] = df["intensity"].astype(float)
    return df
