"""Forecast screen projection: time range, budget planner and insights.

Call context:
    The ``/forecast`` page re-runs ``getBudgetForecast(home, years)`` whenever
    ``set_time_range`` changes the window and loads ``getForecastConfidence``
    once. The budget planner is only shown for the one-year window; insights
    and the yearly breakdown only for multi-year windows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from kept.domain.entities import BudgetForecast, ForecastConfidence
from kept.domain.formatting import format_currency, js_round
from kept.domain.query import QueryResult

from .status_format import EMPTY_HOMES, EmptyState

TIME_RANGES = (1, 5, 10)
BUDGET_PERIODS = ("weekly", "biweekly", "monthly")
DEFAULT_BUDGET_PERIOD = "biweekly"

CONFIDENCE_TONES = {"high": "success", "medium": "warning", "low": "danger"}


def confidence_tone(level: Optional[str]) -> str:
    return CONFIDENCE_TONES.get((level or "").lower(), "muted")


def time_range_label(years: int) -> str:
    return f"{years} Year{'s' if years > 1 else ''}"


def budget_amount(forecast: Optional[BudgetForecast], period: str) -> float:
    """Amount to set aside per period: weekly is half a paycheck."""
    if forecast is None or forecast.summary is None:
        return 0
    summary = forecast.summary
    if period == "weekly":
        return js_round(summary.per_paycheck / 2)
    if period == "biweekly":
        return summary.per_paycheck
    if period == "monthly":
        return summary.per_month
    return 0


@dataclass
class BreakdownItem:
    label: str
    amount: str
    percent: int


@dataclass
class YearBar:
    year: str
    total: str
    width_percent: float
    maintenance_share: float
    repairs_share: float
    replacements_share: float


class ForecastVM:
    def __init__(self) -> None:
        self.time_range = 1
        self.budget_period = DEFAULT_BUDGET_PERIOD
        self.forecast: QueryResult[Optional[BudgetForecast]] = QueryResult.pending()
        self.confidence: QueryResult[Optional[ForecastConfidence]] = QueryResult.pending()

    def set_time_range(self, years: int) -> bool:
        """Select a window; returns ``True`` when the forecast must be refetched."""
        years = int(years)
        if years not in TIME_RANGES:
            raise ValueError(f"Unsupported forecast range: {years}")
        if years == self.time_range:
            return False
        self.time_range = years
        self.forecast = QueryResult.pending()
        return True

    def set_budget_period(self, period: str) -> None:
        if period not in BUDGET_PERIODS:
            raise ValueError(f"Unsupported budget period: {period}")
        self.budget_period = period

    def set_forecast(self, result: QueryResult[Optional[BudgetForecast]]) -> None:
        self.forecast = result

    def set_confidence(self, result: QueryResult[Optional[ForecastConfidence]]) -> None:
        self.confidence = result

    @property
    def is_loading(self) -> bool:
        return self.forecast.is_loading

    @property
    def is_skipped(self) -> bool:
        return self.forecast.is_skipped

    def empty_state(self) -> Optional[EmptyState]:
        return EMPTY_HOMES if self.forecast.is_skipped else None

    @property
    def _current(self) -> Optional[BudgetForecast]:
        return self.forecast.value if self.forecast.is_resolved else None

    # ------------------------------------------------------------------
    # Confidence
    # ------------------------------------------------------------------
    def confidence_card(self) -> Optional[dict]:
        conf = self.confidence.value if self.confidence.is_resolved else None
        if conf is None:
            return None
        return {
            "score_label": f"{conf.score}%",
            "score": max(0, min(100, conf.score)),
            "level": conf.level,
            "tone": confidence_tone(conf.level),
            "description": conf.description,
            "improvements": [
                f"{suggestion} (+{gain}%)" for suggestion, gain in conf.top_improvements[:2]
            ],
        }

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------
    @property
    def summary_title(self) -> str:
        return f"Next {self.time_range} Years" if self.time_range > 1 else "Next 12 Months"

    def total_label(self) -> str:
        forecast = self._current
        total = forecast.totals.grand_total if forecast and forecast.totals else 0
        return format_currency(total)

    def breakdown(self) -> List[BreakdownItem]:
        forecast = self._current
        totals = forecast.totals if forecast else None
        if totals is None:
            return []
        grand = totals.grand_total or 1
        return [
            BreakdownItem(label, format_currency(amount), js_round(amount / grand * 100))
            for label, amount in (
                ("Maintenance", totals.maintenance),
                ("Repairs", totals.repairs),
                ("Replacements", totals.replacements),
            )
        ]

    def diy_savings_label(self) -> str:
        forecast = self._current
        savings = forecast.insights.total_diy_savings if forecast and forecast.insights else 0
        return f"DIY all tasks: Save {format_currency(savings)}" if savings > 0 else ""

    # ------------------------------------------------------------------
    # Budget planner
    # ------------------------------------------------------------------
    @property
    def show_budget_planner(self) -> bool:
        return self.time_range == 1 and self._current is not None

    def budget_label(self) -> str:
        return format_currency(budget_amount(self._current, self.budget_period))

    def budget_period_label(self) -> str:
        return "per " + self.budget_period.replace("biweekly", "paycheck")

    # ------------------------------------------------------------------
    # Multi-year insights
    # ------------------------------------------------------------------
    @property
    def show_insights(self) -> bool:
        forecast = self._current
        return self.time_range > 1 and forecast is not None and forecast.insights is not None

    def insight_lines(self) -> List[str]:
        if not self.show_insights:
            return []
        insights = self._current.insights  # type: ignore[union-attr]
        lines = []
        if insights.peak_year:
            lines.append(
                f"Peak Spending Year {insights.peak_year}: {format_currency(insights.peak_amount)}"
            )
        if insights.biggest_expense_name:
            lines.append(
                f"Biggest Expense {insights.biggest_expense_name}: "
                f"{format_currency(insights.biggest_expense_cost)}"
            )
        for name, year in insights.upcoming_replacements[:3]:
            lines.append(f"Replace {name} ({year})")
        return lines

    def year_bars(self) -> List[YearBar]:
        forecast = self._current
        if self.time_range <= 1 or forecast is None:
            return []
        peak = forecast.insights.peak_amount if forecast.insights else 0
        bars = []
        for row in forecast.yearly_breakdown:
            total = row.grand_total
            scale = peak or total
            bars.append(
                YearBar(
                    year=str(row.year or ""),
                    total=format_currency(total),
                    width_percent=min(100.0, total / scale * 100) if scale else 0.0,
                    maintenance_share=row.maintenance / total if total else 0.0,
                    repairs_share=row.repairs / total if total else 0.0,
                    replacements_share=row.replacements / total if total else 0.0,
                )
            )
        return bars


__all__ = [
    "BUDGET_PERIODS",
    "BreakdownItem",
    "ForecastVM",
    "TIME_RANGES",
    "YearBar",
    "budget_amount",
    "confidence_tone",
    "time_range_label",
]
