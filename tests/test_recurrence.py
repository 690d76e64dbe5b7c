from datetime import date

import pytest

from smartplan.models import Task
from smartplan.recurrence import (
    first_occurrence,
    is_recurring_task,
    next_occurrence,
    normalize_recurrence,
)


def test_none_has_no_next_occurrence():
    assert next_occurrence({"type": "None"}, "2025-06-11") is None
    assert next_occurrence(None, "2025-06-11") is None


def test_daily_crosses_year_boundary():
    assert next_occurrence({"type": "Daily"}, "2025-12-31") == "2026-01-01"


def test_weekly_with_days_picks_next_listed_weekday():
    rule = {"type": "Weekly", "daysOfWeek": ["Mon", "Wed"]}
    assert next_occurrence(rule, "2025-06-09") == "2025-06-11"  # Monday -> Wednesday
    assert next_occurrence(rule, "2025-06-13") == "2025-06-16"  # Friday -> next Monday
    assert next_occurrence(rule, "2025-06-11") == "2025-06-16"  # never the same day


def test_weekly_without_days_falls_back_to_seven_days():
    assert next_occurrence({"type": "Weekly", "daysOfWeek": []}, "2025-06-11") == "2025-06-18"


def test_monthly_clamps_to_end_of_month():
    assert next_occurrence({"type": "Monthly"}, "2025-01-31") == "2025-02-28"
    assert next_occurrence({"type": "Monthly"}, "2024-01-31") == "2024-02-29"
    assert next_occurrence({"type": "Monthly"}, "2025-12-15") == "2026-01-15"


def test_custom_day_interval():
    rule = {"type": "Custom", "unit": "day", "interval": 2}
    assert next_occurrence(rule, "2025-06-11") == "2025-06-13"


def test_custom_week_without_days_jumps_whole_weeks():
    rule = {"type": "Custom", "unit": "week", "interval": 2}
    assert next_occurrence(rule, "2025-06-11") == "2025-06-25"


def test_custom_week_with_days_prefers_the_current_cycle():
    rule = {"type": "Custom", "unit": "week", "interval": 3, "daysOfWeek": ["Fri"]}
    assert next_occurrence(rule, "2025-06-11") == "2025-06-13"


def test_custom_month_interval():
    rule = {"type": "Custom", "unit": "month", "interval": 2}
    assert next_occurrence(rule, "2025-12-31") == "2026-02-28"


@pytest.mark.parametrize("interval", [None, 0, -1, "abc"])
def test_custom_without_usable_interval_has_no_next(interval):
    rule = {"type": "Custom", "unit": "day", "interval": interval}
    assert next_occurrence(rule, "2025-06-11") is None


def test_next_occurrence_defaults_to_today():
    assert next_occurrence({"type": "Daily"}) == "2025-06-12"
    assert next_occurrence({"type": "Daily"}, date(2025, 6, 1)) == "2025-06-02"


@pytest.mark.parametrize("rule", [
    {"type": "Custom", "unit": "day", "interval": 10 ** 7},
    {"type": "Custom", "unit": "week", "interval": 10 ** 7},
    {"type": "Custom", "unit": "month", "interval": 10 ** 7},
])
def test_interval_past_the_calendar_has_no_next(rule):
    assert next_occurrence(rule, "2025-06-11") is None


def test_last_representable_date_has_no_next():
    assert next_occurrence({"type": "Daily"}, "9999-12-31") is None
    assert next_occurrence({"type": "Monthly"}, "9999-12-15") is None
    assert next_occurrence({"type": "Weekly", "daysOfWeek": ["Mon"]}, "9999-12-30") is None


def test_first_occurrence_none_returns_base_even_in_the_past():
    assert first_occurrence({"type": "None"}, "2025-01-01") == "2025-01-01"
    assert first_occurrence({"type": "None"}) is None


def test_first_occurrence_keeps_future_base_date():
    assert first_occurrence({"type": "Daily"}, "2025-07-01") == "2025-07-01"
    assert first_occurrence({"type": "Weekly", "daysOfWeek": ["Mon"]}, "2025-06-11") == "2025-06-11"


def test_first_occurrence_weekly_scans_from_today():
    assert first_occurrence({"type": "Weekly", "daysOfWeek": ["Mon"]}, None) == "2025-06-16"
    assert first_occurrence({"type": "Weekly", "daysOfWeek": ["Wed", "Sat"]}) == "2025-06-11"
    custom = {"type": "Custom", "unit": "week", "interval": 2, "daysOfWeek": ["Thu"]}
    assert first_occurrence(custom, "2025-01-01") == "2025-06-12"


def test_first_occurrence_otherwise_base_or_today():
    assert first_occurrence({"type": "Daily"}, "2025-01-01") == "2025-01-01"
    assert first_occurrence({"type": "Monthly"}) == "2025-06-11"
    assert first_occurrence({"type": "Weekly", "daysOfWeek": []}) == "2025-06-11"


def test_first_occurrence_accepts_explicit_today():
    rule = {"type": "Weekly", "daysOfWeek": ["Mon"]}
    assert first_occurrence(rule, None, today=date(2025, 6, 16)) == "2025-06-16"


def test_normalize_recurrence_defaults():
    rec = normalize_recurrence(None)
    assert rec.model_dump(by_alias=True) == {
        "type": "None",
        "interval": None,
        "unit": "day",
        "daysOfWeek": [],
    }


def test_normalize_recurrence_filters_and_orders_days():
    rec = normalize_recurrence({
        "type": "Weekly",
        "interval": 4,
        "daysOfWeek": ["Wed", "Mon", "Mon", "Funday", "", None, "friday"],
    })
    assert rec.type == "Weekly"
    assert rec.interval is None
    assert rec.days_of_week == ["Mon", "Wed", "Fri"]


def test_normalize_recurrence_drops_days_where_they_mean_nothing():
    assert normalize_recurrence({"type": "Daily", "daysOfWeek": ["Mon"]}).days_of_week == []
    custom_day = {"type": "Custom", "unit": "day", "interval": "3", "daysOfWeek": ["Mon"]}
    rec = normalize_recurrence(custom_day)
    assert rec.days_of_week == []
    assert rec.interval == 3


def test_normalize_recurrence_recovers_from_bad_tokens():
    rec = normalize_recurrence({"type": "Hourly", "unit": "fortnight", "interval": "x"})
    assert (rec.type, rec.unit, rec.interval) == ("None", "day", None)
    assert normalize_recurrence("weekly").type == "Weekly"
    assert normalize_recurrence(42).type == "None"


def test_normalize_recurrence_is_idempotent():
    once = normalize_recurrence({"type": "custom", "unit": "WEEK", "interval": 2.0,
                                 "daysOfWeek": ["sun", "Tue"]})
    twice = normalize_recurrence(once)
    assert once == twice
    assert once.days_of_week == ["Tue", "Sun"]


def test_is_recurring_task():
    assert is_recurring_task({"recurrence": {"type": "Daily"}})
    assert not is_recurring_task({"recurrence": None})
    assert not is_recurring_task(Task(id=1, title="x"))
