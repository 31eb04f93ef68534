from datetime import date

import pytest

from forecasting.exceptions import MissingQuotaPeriod
from forecasting.quota_periods import PeriodWindow, select_quota_period

Q1 = PeriodWindow(id="q1", period_name="Q1", period_start=date(2026, 1, 1), period_end=date(2026, 3, 31))
Q2 = PeriodWindow(id="q2", period_name="Q2", period_start=date(2026, 4, 1), period_end=date(2026, 6, 30))
Q3 = PeriodWindow(id="q3", period_name="Q3", period_start=date(2026, 7, 1), period_end=date(2026, 9, 30))


def test_explicit_id_wins():
    assert select_quota_period([Q1, Q2, Q3], "q1", today=date(2026, 5, 1)) is Q1


def test_period_containing_today():
    assert select_quota_period([Q1, Q2, Q3], today=date(2026, 5, 1)) is Q2


def test_boundaries_are_inclusive():
    assert select_quota_period([Q1, Q2], today=date(2026, 6, 30)) is Q2
    assert select_quota_period([Q1, Q2], today=date(2026, 4, 1)) is Q2


def test_latest_start_when_nothing_contains_today():
    assert select_quota_period([Q1, Q3, Q2], today=date(2027, 1, 15)) is Q3


def test_unknown_explicit_id_falls_back():
    assert select_quota_period([Q1, Q2], "nope", today=date(2026, 2, 1)) is Q1


def test_no_periods_raises():
    with pytest.raises(MissingQuotaPeriod) as exc:
        select_quota_period([], today=date(2026, 2, 1))
    assert exc.value.code == "missing_quota_period"


def test_as_dict_uses_iso_dates():
    assert Q1.as_dict()["period_start"] == "2026-01-01"
    assert Q1.contains(date(2026, 3, 31))
