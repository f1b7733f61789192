"""Tests for calendar units (floor, ceil, offset, count, every)."""

from __future__ import annotations

from datetime import datetime

import pytest

from eventdrops.time_scale.calendar import (
    DAY,
    DECADE,
    HOUR,
    MAX_INSTANT,
    MILLENNIUM,
    MILLISECOND,
    MIN_INSTANT,
    MINUTE,
    MONTH,
    SECOND,
    WEEK,
    YEAR,
    CalendarUnit,
    calendar_unit_for,
)
from eventdrops.time_scale.granularity import Granularity


@pytest.mark.parametrize(
    "unit, instant, expected",
    [
        (MILLISECOND, datetime(2020, 1, 2, 13, 45, 10, 123000), datetime(2020, 1, 2, 13, 45, 10, 123000)),
        (SECOND, datetime(2020, 1, 2, 13, 45, 10, 123000), datetime(2020, 1, 2, 13, 45, 10)),
        (MINUTE, datetime(2020, 1, 2, 13, 45, 10), datetime(2020, 1, 2, 13, 45)),
        (HOUR, datetime(2020, 1, 2, 13, 45, 10), datetime(2020, 1, 2, 13)),
        (DAY, datetime(2020, 1, 2, 13, 45, 10), datetime(2020, 1, 2)),
        (WEEK, datetime(2020, 1, 8, 9), datetime(2020, 1, 5)),  # Wednesday -> Sunday
        (WEEK, datetime(2020, 1, 5), datetime(2020, 1, 5)),
        (MONTH, datetime(2020, 2, 17, 8), datetime(2020, 2, 1)),
        (YEAR, datetime(2020, 7, 4), datetime(2020, 1, 1)),
        (DECADE, datetime(2023, 5, 5), datetime(2020, 1, 1)),
        (MILLENNIUM, datetime(1999, 12, 31), datetime(1000, 1, 1)),
    ],
)
def test_floor(unit, instant, expected) -> None:
    assert unit.floor(instant) == expected


def test_ceil_of_aligned_instant_is_itself() -> None:
    assert DAY.ceil(datetime(2020, 1, 2)) == datetime(2020, 1, 2)
    assert MONTH.ceil(datetime(2020, 3, 1)) == datetime(2020, 3, 1)


def test_ceil_rounds_up_unaligned_instant() -> None:
    assert DAY.ceil(datetime(2020, 1, 2, 0, 0, 0, 1000)) == datetime(2020, 1, 3)
    assert MONTH.ceil(datetime(2020, 2, 10)) == datetime(2020, 3, 1)
    assert YEAR.ceil(datetime(2020, 1, 1, 1)) == datetime(2021, 1, 1)


def test_month_offset_respects_month_length() -> None:
    assert MONTH.offset(datetime(2020, 1, 31), 1) == datetime(2020, 2, 29)
    assert MONTH.offset(datetime(2021, 1, 31), 1) == datetime(2021, 2, 28)
    assert MONTH.offset(datetime(2020, 11, 15), 3) == datetime(2021, 2, 15)
    assert MONTH.offset(datetime(2020, 3, 1), -3) == datetime(2019, 12, 1)


def test_year_offset_handles_leap_day() -> None:
    assert YEAR.offset(datetime(2020, 2, 29), 1) == datetime(2021, 2, 28)
    assert DECADE.offset(datetime(2020, 1, 1), 2) == datetime(2040, 1, 1)


def test_count_uses_calendar_boundaries() -> None:
    # Boundaries crossed, not elapsed whole units.
    assert MONTH.count(datetime(2020, 1, 31), datetime(2020, 2, 1)) == 1
    assert YEAR.count(datetime(2020, 6, 1), datetime(2022, 1, 1)) == 2
    assert DAY.count(datetime(2020, 1, 1, 23), datetime(2020, 1, 2, 1)) == 1
    assert WEEK.count(datetime(2020, 1, 1), datetime(2020, 1, 3)) == 0
    assert WEEK.count(datetime(2020, 1, 4), datetime(2020, 1, 5)) == 1
    assert HOUR.count(datetime(2020, 1, 1), datetime(2020, 1, 1, 3)) == 3


def test_count_is_negative_when_reversed() -> None:
    assert DAY.count(datetime(2020, 1, 5), datetime(2020, 1, 1)) == -4


def test_every_hour_range() -> None:
    three_hours = HOUR.every(3)
    assert three_hours.range(datetime(2020, 1, 1, 1), datetime(2020, 1, 1, 10)) == [
        datetime(2020, 1, 1, 3),
        datetime(2020, 1, 1, 6),
        datetime(2020, 1, 1, 9),
    ]


def test_every_day_uses_day_of_month() -> None:
    two_days = DAY.every(2)
    assert two_days.floor(datetime(2020, 1, 2, 12)) == datetime(2020, 1, 1)
    assert two_days.offset(datetime(2020, 1, 1), 1) == datetime(2020, 1, 3)


def test_every_millisecond_is_epoch_aligned() -> None:
    five_ms = MILLISECOND.every(5)
    assert five_ms.floor(datetime(2020, 1, 1, 0, 0, 0, 123000)) == datetime(2020, 1, 1, 0, 0, 0, 120000)


def test_every_month_quarter() -> None:
    quarters = MONTH.every(3)
    assert quarters.floor(datetime(2020, 5, 20)) == datetime(2020, 4, 1)
    assert quarters.range(datetime(2020, 1, 1), datetime(2021, 1, 1)) == [
        datetime(2020, 1, 1),
        datetime(2020, 4, 1),
        datetime(2020, 7, 1),
        datetime(2020, 10, 1),
    ]


def test_every_rejects_non_positive_steps() -> None:
    assert YEAR.every(0) is None
    assert YEAR.every(float("nan")) is None
    assert YEAR.every(1) is YEAR


def test_range_is_empty_for_empty_interval() -> None:
    assert DAY.range(datetime(2020, 1, 2), datetime(2020, 1, 2)) == []


def test_arithmetic_clamps_to_representable_range() -> None:
    assert YEAR.offset(datetime(9999, 6, 1), 5) == MAX_INSTANT
    assert MONTH.offset(datetime(1, 2, 1), -3) == MIN_INSTANT
    assert MILLENNIUM.floor(datetime(500, 1, 1)) == MIN_INSTANT
    assert DAY.offset(datetime(9999, 12, 31), 2) == MAX_INSTANT


def test_calendar_unit_for_every_granularity() -> None:
    for granularity in Granularity:
        unit = calendar_unit_for(granularity)
        assert isinstance(unit, CalendarUnit)
    assert calendar_unit_for(Granularity.MILLISECONDS) is MILLISECOND
    assert calendar_unit_for(Granularity.WEEKS) is WEEK
    assert calendar_unit_for("fortnights") is DAY  # type: ignore[arg-type]
