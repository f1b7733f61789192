"""Instants and time domains.

An instant is a naive ``datetime`` in UTC wall-clock with millisecond
resolution. Values coming from event records or axis scales are coerced with
:func:`coerce_instant`; anything that cannot be read as a point in time
becomes ``None`` and is treated as invalid by callers.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import numpy as np
import pandas as pd

ONE_MILLISECOND = timedelta(milliseconds=1)


class InvalidDomainError(ValueError):
    """Raised when a domain is missing, too short, or has non-instant bounds."""


def _to_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse strings, numbers (epoch ms) and datetime64 through pandas."""
    if isinstance(value, (int, float, np.integer, np.floating)):
        if not math.isfinite(float(value)):
            return None
        ts = pd.to_datetime(value, unit="ms", errors="coerce")
    else:
        ts = pd.to_datetime(value, errors="coerce")
    if ts is pd.NaT or pd.isna(ts):
        return None
    return ts


def coerce_instant(value: Any) -> Optional[datetime]:
    """Return value as a naive UTC datetime truncated to milliseconds.

    Returns None for missing, NaT, NaN, bool, unparsable or unsupported values.
    """
    if value is None or value is pd.NaT or isinstance(value, bool):
        return None

    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime(warn=False)
    elif isinstance(value, datetime):
        pass
    elif isinstance(value, date):
        value = datetime(value.year, value.month, value.day)
    elif isinstance(value, (str, np.datetime64, int, float, np.integer, np.floating)):
        ts = _to_timestamp(value)
        if ts is None:
            return None
        value = ts.to_pydatetime(warn=False)
    else:
        return None

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def milliseconds_between(a: datetime, b: datetime) -> float:
    """Signed elapsed milliseconds from a to b."""
    return (b - a) / ONE_MILLISECOND


@dataclass(frozen=True)
class TimeDomain:
    """The visible time window, ``start < end``.

    Build one with :func:`validate_domain` (or ``TimeDomain.of``) so that
    both bounds are coerced and checked.
    """

    start: datetime
    end: datetime

    @classmethod
    def of(cls, start: Any, end: Any) -> "TimeDomain":
        return validate_domain((start, end))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_ms(self) -> float:
        return milliseconds_between(self.start, self.end)

    def contains(self, instant: datetime) -> bool:
        """True if instant lies in the half-open interval [start, end)."""
        return self.start <= instant < self.end

    def as_tuple(self) -> tuple[datetime, datetime]:
        return self.start, self.end


def validate_domain(domain: Any) -> TimeDomain:
    """Validate an axis domain and return it as a TimeDomain.

    Args:
        domain: A TimeDomain, or a sequence whose first two values are the
            start and end instants (as returned by an axis scale).

    Returns:
        The well-formed domain.

    Raises:
        InvalidDomainError: If the domain is missing, has fewer than two
            values, either bound is not an instant, or start >= end.
    """
    if isinstance(domain, TimeDomain):
        values: Sequence[Any] = domain.as_tuple()
    elif isinstance(domain, Sequence) and not isinstance(domain, (str, bytes)):
        values = domain
    elif domain is None:
        raise InvalidDomainError("domain is missing")
    else:
        raise InvalidDomainError(f"domain must be a sequence of instants, got {type(domain).__name__}")

    if len(values) < 2:
        raise InvalidDomainError(f"domain needs two values, got {len(values)}")

    start = coerce_instant(values[0])
    end = coerce_instant(values[1])
    if start is None or end is None:
        raise InvalidDomainError(f"domain bounds are not valid instants: {values[0]!r}, {values[1]!r}")
    if not start < end:
        raise InvalidDomainError(f"domain start {start.isoformat()} is not before end {end.isoformat()}")

    return TimeDomain(start, end)
