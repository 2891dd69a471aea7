from datetime import date, datetime, time

import pytest

from doseengine.types import Dose, Regimen
from doseengine.dosing import (
    single_dose, daily_doses, combine_regimens, remove_dose, from_explicit_schedule,
    parse_time_of_day, dose_datetime,
)
from doseengine.helpers import MS_PER_DAY, to_epoch_ms


T0 = 1_717_999_200_000


def test_single_dose_from_datetime():
    when = datetime(2024, 6, 10, 8, 0)
    reg = single_dose(30, when)
    assert reg.doses == (Dose(time_ms=to_epoch_ms(when), amount_mg=30.0),)


def test_daily_doses_are_exactly_a_day_apart():
    reg = daily_doses(30.0, T0, 5)
    assert len(reg) == 5
    assert [d.time_ms for d in reg] == [T0 + i * MS_PER_DAY for i in range(5)]
    assert all(d.amount_mg == 30.0 for d in reg)


@pytest.mark.parametrize("amount", [0, -5.0])
def test_non_positive_amount_rejected(amount):
    with pytest.raises(ValueError, match="amount_mg must be > 0"):
        single_dose(amount, T0)
    with pytest.raises(ValueError, match="amount_mg must be > 0"):
        daily_doses(amount, T0, 3)


@pytest.mark.parametrize("days", [0, -1, 2.5])
def test_daily_needs_positive_whole_days(days):
    with pytest.raises(ValueError, match="days must be a positive integer"):
        daily_doses(30.0, T0, days)


def test_combine_sorts_and_keeps_duplicates():
    a = daily_doses(30.0, T0, 2)
    b = single_dose(10.0, T0 + 3_600_000)
    c = single_dose(10.0, T0)
    combined = combine_regimens(a, b, c)
    assert [d.time_ms for d in combined] == [T0, T0, T0 + 3_600_000, T0 + MS_PER_DAY]


def test_remove_dose_drops_all_at_that_time():
    reg = combine_regimens(daily_doses(30.0, T0, 3), single_dose(5.0, T0 + MS_PER_DAY))
    trimmed = remove_dose(reg, T0 + MS_PER_DAY)
    assert [d.time_ms for d in trimmed] == [T0, T0 + 2 * MS_PER_DAY]
    # input regimen untouched
    assert len(reg) == 4


def test_remove_unknown_time_is_a_no_op():
    reg = daily_doses(30.0, T0, 2)
    assert remove_dose(reg, T0 + 1) == reg
    assert remove_dose(Regimen(), T0) == Regimen()


def test_explicit_schedule_is_sorted():
    reg = from_explicit_schedule([(T0 + MS_PER_DAY, 20), (T0, 30)])
    assert [(d.time_ms, d.amount_mg) for d in reg] == [(T0, 30.0), (T0 + MS_PER_DAY, 20.0)]


def test_parse_time_of_day():
    assert parse_time_of_day("08:00") == time(8, 0)
    assert parse_time_of_day(" 21:30 ") == time(21, 30)


@pytest.mark.parametrize("text", ["8am", "25:00", "12:61", "", "1:2:3"])
def test_parse_time_of_day_rejects_garbage(text):
    with pytest.raises(ValueError, match="HH:MM"):
        parse_time_of_day(text)


def test_dose_datetime_combines_day_and_clock():
    assert dose_datetime(date(2024, 6, 10), "21:30") == datetime(2024, 6, 10, 21, 30)
    assert dose_datetime(date(2024, 6, 10), time(7, 5)) == datetime(2024, 6, 10, 7, 5)
