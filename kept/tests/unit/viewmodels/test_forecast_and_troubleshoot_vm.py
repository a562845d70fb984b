from __future__ import annotations

import pytest

from kept.domain.entities import BudgetForecast, ForecastConfidence, HomeSystem
from kept.domain.query import QueryResult
from kept.viewmodels.forecast_vm import ForecastVM, budget_amount, confidence_tone, time_range_label
from kept.viewmodels.status_format import EMPTY_HOMES
from kept.viewmodels.troubleshoot_vm import OTHER_SYMPTOM_ID, TroubleshootVM

ONE_YEAR = {
    "years": 1,
    "summary": {"total": 2400, "perMonth": 200, "perPaycheck": 92.31},
    "totals": {"grandTotal": 2400, "maintenance": 600, "repairs": 600, "replacements": 1200},
    "insights": {"totalDiySavings": 420},
}

FIVE_YEARS = {
    "years": 5,
    "totals": {"grandTotal": 10000},
    "insights": {
        "peakYear": 2028,
        "peakAmount": 4000,
        "biggestExpense": {"name": "Furnace replacement", "cost": 5200},
        "upcomingReplacements": [
            {"name": "Roof", "year": 2030},
            {"name": "AC", "year": 2031},
            {"name": "Water heater", "year": 2032},
            {"name": "Dishwasher", "year": 2033},
        ],
    },
    "yearlyBreakdown": [
        {"year": 2026, "total": 2000, "maintenance": 500, "repairs": 500, "replacements": 1000},
        {"year": 2028, "total": 4000, "replacements": 4000},
        {"year": 2029, "total": 0},
    ],
}


def _forecast(payload: dict) -> QueryResult:
    return QueryResult.resolved(BudgetForecast.from_payload(payload))


def test_one_year_window_shows_budget_planner() -> None:
    vm = ForecastVM()
    vm.set_forecast(_forecast(ONE_YEAR))

    assert vm.summary_title == "Next 12 Months"
    assert vm.total_label() == "$2,400"
    assert vm.show_budget_planner is True
    assert vm.show_insights is False
    assert vm.budget_label() == "$92"
    assert vm.budget_period_label() == "per paycheck"
    vm.set_budget_period("weekly")
    assert vm.budget_label() == "$46"
    vm.set_budget_period("monthly")
    assert (vm.budget_label(), vm.budget_period_label()) == ("$200", "per monthly")
    assert vm.diy_savings_label() == "DIY all tasks: Save $420"
    assert [(b.label, b.percent) for b in vm.breakdown()] == [
        ("Maintenance", 25),
        ("Repairs", 25),
        ("Replacements", 50),
    ]


def test_changing_range_requests_refetch() -> None:
    vm = ForecastVM()
    vm.set_forecast(_forecast(ONE_YEAR))

    assert vm.set_time_range(1) is False
    assert vm.set_time_range(5) is True
    assert vm.is_loading
    assert vm.summary_title == "Next 5 Years"
    with pytest.raises(ValueError):
        vm.set_time_range(3)
    with pytest.raises(ValueError):
        vm.set_budget_period("yearly")


def test_multi_year_insights_and_bars() -> None:
    vm = ForecastVM()
    vm.set_time_range(5)
    vm.set_forecast(_forecast(FIVE_YEARS))

    assert vm.show_budget_planner is False
    assert vm.insight_lines() == [
        "Peak Spending Year 2028: $4,000",
        "Biggest Expense Furnace replacement: $5,200",
        "Replace Roof (2030)",
        "Replace AC (2031)",
        "Replace Water heater (2032)",
    ]
    bars = vm.year_bars()
    assert [b.width_percent for b in bars] == [50.0, 100.0, 0.0]
    assert bars[0].replacements_share == 0.5
    assert bars[2].maintenance_share == 0.0
    assert vm.diy_savings_label() == ""


def test_forecast_without_home_shows_no_home_state() -> None:
    vm = ForecastVM()

    vm.set_forecast(QueryResult.skipped())

    assert vm.is_skipped and not vm.is_loading
    assert vm.empty_state() == EMPTY_HOMES
    vm.set_forecast(_forecast(ONE_YEAR))
    assert vm.empty_state() is None


def test_confidence_card() -> None:
    vm = ForecastVM()
    assert vm.confidence_card() is None

    vm.set_confidence(
        QueryResult.resolved(
            ForecastConfidence.from_payload(
                {
                    "score": 64,
                    "level": "medium",
                    "topImprovements": [
                        {"suggestion": "Add roof date", "potentialGain": 12},
                        {"suggestion": "Add AC", "potentialGain": 8},
                        {"suggestion": "Add panel", "potentialGain": 3},
                    ],
                }
            )
        )
    )
    card = vm.confidence_card()

    assert card["score_label"] == "64%"
    assert card["tone"] == "warning"
    assert card["improvements"] == ["Add roof date (+12%)", "Add AC (+8%)"]


def test_helpers() -> None:
    assert time_range_label(1) == "1 Year"
    assert time_range_label(10) == "10 Years"
    assert confidence_tone("unknown") == "muted"
    assert budget_amount(None, "weekly") == 0


def test_troubleshoot_common_symptom_continues_to_packet_form() -> None:
    vm = TroubleshootVM()
    assert vm.can_continue is False
    assert vm.continue_path() is None

    vm.select("no-heat")

    assert vm.resolved_symptom() == "No heat"
    assert vm.continue_path() == "/packet/new?symptom=No+heat"


def test_troubleshoot_other_uses_typed_text() -> None:
    vm = TroubleshootVM()
    vm.select(OTHER_SYMPTOM_ID)

    assert vm.shows_custom_input
    assert vm.can_continue is False
    vm.custom_symptom = "  Garage door stuck "
    assert vm.resolved_symptom() == "Garage door stuck"
    with pytest.raises(ValueError):
        vm.select("alien-noise")


def test_troubleshoot_system_links_capped() -> None:
    vm = TroubleshootVM()
    vm.set_systems(
        QueryResult.resolved([HomeSystem(id=f"s{i}", name=f"System {i}") for i in range(6)])
    )

    assert vm.system_links() == [("s0", "System 0"), ("s1", "System 1"), ("s2", "System 2"), ("s3", "System 3")]
