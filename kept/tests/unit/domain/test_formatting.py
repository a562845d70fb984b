from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from kept.domain.entities import MaintenanceTask
from kept.domain.formatting import (
    clamp_score,
    diy_savings,
    format_currency,
    format_long_date,
    format_month_year,
    format_relative_date,
    format_short_date,
    format_time_ago,
    health_score_label,
    health_score_tone,
    install_age_years,
    system_age_years,
    system_health_grade,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_format_currency_rounds_to_whole_dollars() -> None:
    assert format_currency(1234.5) == "$1,235"
    assert format_currency(0) == "$0"
    assert format_currency(None) == "$0"
    assert format_currency("abc") == "$0"
    assert format_currency(float("nan")) == "$0"
    assert format_currency(-0.4) == "$0"
    assert format_currency(-12) == "-$12"


def test_date_labels() -> None:
    assert format_short_date("2026-03-05") == "Mar 5"
    assert format_long_date("2026-03-05") == "Thursday, March 5, 2026"
    assert format_month_year("2026-03-05") == "Mar 2026"


def test_unparseable_dates_format_as_empty() -> None:
    assert format_short_date("soon") == ""
    assert format_long_date(None) == ""
    assert format_relative_date("", NOW) == ""
    assert format_time_ago(None, NOW) == ""


def test_relative_dates() -> None:
    assert format_relative_date(NOW - timedelta(hours=2), NOW) == "Today"
    assert format_relative_date(NOW + timedelta(days=1), NOW) == "Tomorrow"
    assert format_relative_date(NOW - timedelta(days=3), NOW) == "3 days ago"
    assert format_relative_date(NOW + timedelta(days=14), NOW) == "2 weeks"
    assert format_relative_date(NOW - timedelta(days=7), NOW) == "1 week ago"
    assert format_relative_date(NOW + timedelta(days=52), NOW) == "May 1"


def test_time_ago() -> None:
    def ms(delta: timedelta) -> int:
        return int((NOW - delta).timestamp() * 1000)

    assert format_time_ago(ms(timedelta(minutes=5)), NOW) == "5m ago"
    assert format_time_ago(ms(timedelta(hours=3)), NOW) == "3h ago"
    assert format_time_ago(ms(timedelta(days=2)), NOW) == "2d ago"


def test_health_score_bands() -> None:
    assert health_score_label(None) == "Excellent"
    assert health_score_label(75) == "Good"
    assert health_score_label(50) == "Fair"
    assert health_score_label(40) == "Needs Attention"
    assert health_score_tone(95) == "excellent"
    assert health_score_tone(10) == "danger"
    assert system_health_grade(35) == ("Needs Attention", "warning")
    assert system_health_grade(20) == ("Critical", "danger")
    assert clamp_score(140) == 100.0
    assert clamp_score(None) == 0.0


def test_diy_savings_never_negative() -> None:
    cheap_pro = MaintenanceTask(id="a", pro_cost_low=10, pro_cost_high=10, diy_cost_low=50, diy_cost_high=50)
    saving = MaintenanceTask(id="b", pro_cost_low=100, pro_cost_high=200, diy_cost_low=10, diy_cost_high=30)

    assert diy_savings(cheap_pro) == 0
    assert diy_savings(saving) == 130


def test_system_age_falls_back_to_year_built() -> None:
    today = date(2026, 3, 10)

    assert system_age_years("2014-06-01", None, today) == 12
    assert system_age_years(None, 2000, today) == 26
    assert system_age_years(None, None, today) == 0


def test_install_age_years_one_decimal() -> None:
    assert install_age_years("2024-03-10", NOW) == 2.0
    assert install_age_years(None, NOW) == 0.0
