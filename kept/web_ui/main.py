"""NiceGUI entrypoint for the Kept web runtime."""

from __future__ import annotations

import argparse
from contextlib import contextmanager
import json
import os
from typing import Iterator, Optional

from nicegui import ui

from kept.domain.ports import UseCaseError
from kept.domain.query import QueryResult
from kept.usecases.packets import SharedPacket
from kept.utils.logging import configure_root
from kept.viewmodels.care_vm import CareVM
from kept.viewmodels.common import ERROR_TITLE
from kept.viewmodels.forecast_vm import BUDGET_PERIODS, TIME_RANGES, ForecastVM, time_range_label
from kept.viewmodels.home_dashboard_vm import FORECAST_YEARS, UPCOMING_LIMIT, HomeDashboardVM
from kept.viewmodels.home_details_vm import HomeDetailsVM
from kept.viewmodels.onboarding_vm import (
    HOME_FORM_FIELDS,
    ROUTE_HOME,
    OnboardingDatesVM,
    OnboardingHomeVM,
    OnboardingSystemsVM,
)
from kept.viewmodels.packets_vm import NewPacketVM, PacketDetailVM, PacketsVM
from kept.viewmodels.settings_screen_vm import (
    APP_VERSION,
    HELP_URL,
    PRIVACY_URL,
    SUPPORT_EMAIL,
    TERMS_URL,
    SettingsScreenVM,
    SubscriptionVM,
)
from kept.viewmodels.status_format import SORT_LABELS, EmptyState
from kept.viewmodels.systems_vm import DETAIL_TABS, SystemDetailVM, SystemsVM
from kept.viewmodels.task_detail_vm import TaskDetailVM
from kept.viewmodels.troubleshoot_vm import COMMON_SYMPTOMS, TroubleshootVM
from kept.web_ui.runtime import WebRuntime
from kept.web_ui.viewmodels import BROWSER_SETTINGS_KEY, WebSettingsVM

NAV_ITEMS = (
    ("Home", "/"),
    ("Care", "/care"),
    ("Systems", "/systems"),
    ("Forecast", "/forecast"),
    ("Packets", "/packets"),
    ("Settings", "/settings"),
)

TONE_COLORS = {
    "success": "positive",
    "warning": "warning",
    "danger": "negative",
    "primary": "primary",
    "info": "info",
    "muted": "grey-6",
    "default": "grey-6",
}


def _install_theme() -> None:
    """Install page CSS tokens for the web runtime."""
    ui.add_head_html(
        """
<style>
:root {
  --kept-bg: #f6f4ef;
  --kept-card: #ffffff;
  --kept-border: #e2ddd3;
  --kept-accent: #2f6f4e;
  --kept-muted: #6b6b6b;
}
body { background: var(--kept-bg); }
.kept-page { max-width: 720px; margin: 0 auto; padding: 12px; }
.kept-card { background: var(--kept-card); border: 1px solid var(--kept-border); border-radius: 14px; }
.kept-muted { color: var(--kept-muted); }
</style>
        """
    )


def _color(tone: str) -> str:
    return TONE_COLORS.get(tone, "grey-6")


def _alert(title: str, message: str) -> None:
    """Render view-model alerts as NiceGUI toasts."""
    color = "negative" if title == ERROR_TITLE else "positive"
    ui.notify(f"{title}: {message}", color=color, close_button="OK")


def _notify_error(exc: Exception) -> None:
    """Render exceptions as concise NiceGUI toasts."""
    message = exc.message if isinstance(exc, UseCaseError) else str(exc)
    ui.notify(message, color="negative", close_button="OK")


def _render_empty(state: Optional[EmptyState], action_target: str = "") -> None:
    if state is None:
        return
    with ui.column().classes("w-full items-center q-pa-md"):
        ui.label(state.title).classes("text-h6")
        if state.description:
            ui.label(state.description).classes("kept-muted text-center")
        if state.action_label and action_target:
            ui.button(state.action_label, on_click=lambda: ui.navigate.to(action_target))


@contextmanager
def _frame(title: str, *, back: Optional[str] = None, nav: bool = True) -> Iterator[None]:
    _install_theme()
    with ui.column().classes("kept-page w-full q-gutter-sm"):
        with ui.row().classes("w-full items-center justify-between"):
            with ui.row().classes("items-center"):
                if back:
                    ui.button(icon="arrow_back", on_click=lambda: ui.navigate.to(back)).props("flat round dense")
                ui.label(title).classes("text-h5")
        yield
        if nav:
            with ui.row().classes("w-full justify-around q-mt-md"):
                for label, target in NAV_ITEMS:
                    ui.link(label, target)


def _share_done(shared: SharedPacket) -> None:
    ui.clipboard.write(shared.message)
    ui.notify(f"Share link copied: {shared.url}", color="positive")


def _build_ui(runtime: WebRuntime) -> None:
    """Register the NiceGUI pages for the runtime."""

    def due_soon_days() -> int:
        return runtime.settings_vm.due_soon_days

    def redirect_to_onboarding() -> bool:
        """Send users that have not finished onboarding to the welcome page."""
        try:
            if runtime.needs_onboarding():
                ui.navigate.to("/onboarding")
                return True
        except UseCaseError as exc:
            _notify_error(exc)
        return False

    # ------------------------------------------------------------------
    # Home dashboard
    # ------------------------------------------------------------------
    @ui.page("/")
    def dashboard_page() -> None:
        if redirect_to_onboarding():
            return
        vm = HomeDashboardVM(due_soon_days=due_soon_days())
        try:
            home = runtime.active_home()
            vm.set_home(QueryResult.resolved(home))
            home_id = home.id if home else None
            backend = runtime.backend
            vm.set_tasks(runtime.query(backend.get_upcoming_tasks, home_id, limit=UPCOMING_LIMIT))
            vm.set_systems(runtime.query(backend.get_home_systems, home_id))
            vm.set_points(runtime.query(backend.get_bundle_progress, home_id))
            vm.set_forecast(runtime.query(backend.get_budget_forecast, home_id, FORECAST_YEARS))
        except UseCaseError as exc:
            _notify_error(exc)

        with _frame(vm.home_name or "Kept"):
            if vm.show_empty_homes:
                _render_empty(vm.empty_state(), "/onboarding/home")
                return
            if vm.is_loading:
                ui.spinner()
                return
            with ui.row().classes("w-full q-gutter-sm"):
                card = vm.health_card()
                with ui.card().classes("kept-card"):
                    ui.label("Home Health").classes("kept-muted")
                    ui.label(str(card["score"])).classes("text-h4")
                    ui.badge(card["label"], color=_color(card["tone"]))
                    if card["warning"]:
                        ui.label(card["warning"]).classes("text-negative text-caption")
                with ui.card().classes("kept-card"):
                    ui.label("Monthly Budget").classes("kept-muted")
                    budget = vm.monthly_budget_label()
                    if budget is None:
                        ui.spinner()
                    else:
                        ui.label(budget).classes("text-h4")
                    ui.link("View forecast", "/forecast")
            points = vm.points_card()
            if points is not None:
                with ui.card().classes("kept-card w-full"):
                    ui.label(f"{points.current_points} pts").classes("text-h6")
                    ui.label(points.lifetime_label).classes("kept-muted")
                    if points.next_label:
                        ui.label(f"{points.next_label} ({points.remaining_label})")
                        ui.linear_progress(value=points.progress_percent / 100, show_value=False)
                    with ui.row():
                        for name, tone in points.badges:
                            ui.badge(name, color=_color(tone))

            ui.label(vm.section_title).classes("text-h6")
            if vm.tasks_loading:
                ui.spinner()
            else:
                _render_empty(vm.tasks_empty_state())
                for task in vm.task_cards():
                    with ui.card().classes("kept-card w-full cursor-pointer").on(
                        "click", lambda _, t=task.task_id: ui.navigate.to(f"/care/{t}")
                    ):
                        ui.label(task.name).classes("text-subtitle1")
                        ui.label(task.due_label).classes(f"text-{_color(task.tone)}")
                        if task.savings_label:
                            ui.label(task.savings_label).classes("text-positive text-caption")

            ui.label("Systems").classes("text-h6")
            for system in vm.system_cards():
                with ui.row().classes("w-full items-center justify-between kept-card q-pa-sm"):
                    ui.link(system.name, f"/systems/{system.system_id}")
                    ui.badge(f"{system.score} {system.label}", color=_color(system.tone))
            with ui.row():
                ui.button("Something wrong?", on_click=lambda: ui.navigate.to("/troubleshoot"))

    # ------------------------------------------------------------------
    # Care
    # ------------------------------------------------------------------
    @ui.page("/care")
    def care_page() -> None:
        if redirect_to_onboarding():
            return
        vm = CareVM(due_soon_days=due_soon_days())
        home_id: Optional[str] = None

        def load() -> None:
            try:
                backend = runtime.backend
                vm.set_tasks(runtime.query(backend.get_enhanced_tasks, home_id, include_completed=True))
                vm.set_stats(runtime.query(backend.get_task_stats, home_id))
            except UseCaseError as exc:
                _notify_error(exc)

        try:
            home = runtime.active_home()
            home_id = home.id if home else None
            vm.complete_task = runtime.controller.uc_complete_task
        except UseCaseError as exc:
            _notify_error(exc)
        load()

        def quick_complete(task_id: str) -> None:
            if vm.quick_complete(task_id):
                ui.notify("Task completed", color="positive")
                load()
            render.refresh()

        def apply(action) -> None:
            action()
            render.refresh()

        @ui.refreshable
        def render() -> None:
            with ui.row().classes("w-full items-center q-gutter-sm"):
                ui.toggle(
                    {"upcoming": "Upcoming", "completed": "Completed"},
                    value=vm.filters.active_tab.value,
                    on_change=lambda e: apply(lambda: vm.set_tab(e.value)),
                )
                ui.select(
                    {chip.key: chip.label for chip in vm.category_options()},
                    value=vm.filters.category,
                    label="Category",
                    on_change=lambda e: apply(lambda: vm.set_category(e.value or "")),
                ).classes("w-40")
                ui.select(
                    dict(SORT_LABELS),
                    value=vm.filters.sort_by.value,
                    label="Sort",
                    on_change=lambda e: apply(lambda: vm.set_sort(e.value)),
                ).classes("w-32")
            ui.input(
                "Search tasks",
                value=vm.filters.search_query,
                on_change=lambda e: apply(lambda: vm.set_search(str(e.value or ""))),
            ).props("dense outlined debounce=300").classes("w-full")

            if vm.show_stat_cards:
                with ui.row().classes("w-full q-gutter-sm"):
                    for stat in vm.stat_cards():
                        ui.button(
                            f"{stat.count} {stat.label}",
                            color="primary" if stat.active else "grey-4",
                            on_click=lambda _, s=stat.key: apply(lambda: vm.toggle_status_filter(s)),
                        ).props("unelevated")
            if vm.has_active_filters:
                with ui.row().classes("items-center q-gutter-xs"):
                    for chip in vm.active_filter_chips():
                        ui.chip(chip.label)
                    ui.button("Clear", on_click=lambda: apply(vm.clear_filters)).props("flat dense")
            if vm.error_message:
                ui.label(vm.error_message).classes("text-negative")

            if vm.is_skipped:
                _render_empty(vm.empty_state(), "/onboarding/home")
                return
            if vm.is_loading:
                ui.spinner()
                return
            rows = vm.rows()
            if not rows:
                _render_empty(vm.empty_state())
            for row in rows:
                with ui.card().classes("kept-card w-full"):
                    with ui.row().classes("w-full items-center justify-between"):
                        ui.link(row.name, f"/care/{row.task_id}").classes("text-subtitle1")
                        if row.priority_label:
                            ui.badge(row.priority_label, color=_color(row.priority_variant))
                    ui.label(" · ".join(p for p in (row.system_name, row.category) if p)).classes("kept-muted")
                    with ui.row().classes("items-center q-gutter-sm"):
                        ui.label(row.date_label).classes(f"text-{_color(row.tone)}")
                        if row.relative_label:
                            ui.label(row.relative_label).classes("kept-muted")
                        if row.difficulty:
                            ui.label(row.difficulty)
                        if row.estimated_time:
                            ui.label(row.estimated_time)
                    if row.savings_label:
                        ui.label(row.savings_label).classes("text-positive text-caption")
                    if row.can_complete:
                        ui.button(
                            "Done (DIY)",
                            on_click=lambda _, t=row.task_id: quick_complete(t),
                        ).props("outline dense").set_enabled(vm.completing_task_id is None)

        with _frame("Care"):
            render()

    @ui.page("/care/{task_id}")
    def task_detail_page(task_id: str) -> None:
        controller = runtime.controller
        vm = TaskDetailVM(
            on_alert=_alert,
            on_done=lambda: ui.navigate.to("/care"),
            due_soon_days=due_soon_days(),
            snooze_days=runtime.settings_vm.snooze_days,
        )
        try:
            vm.set_task(runtime.query(runtime.backend.get_task, task_id))
            vm.complete_task = controller.uc_complete_task
            vm.snooze_task = controller.uc_snooze_task
        except UseCaseError as exc:
            _notify_error(exc)

        def toggle(key: str) -> None:
            vm.toggle_section(key)

        with _frame("Task", back="/care", nav=False):
            if vm.is_loading:
                ui.spinner()
                return
            header = vm.header()
            ui.label(header["name"]).classes("text-h6")
            if header["system"]:
                ui.label(header["system"]).classes("kept-muted")
            with ui.row().classes("q-gutter-xs"):
                ui.badge(header["status_label"], color=_color(header["status_variant"]))
                if header["priority_label"]:
                    ui.badge(header["priority_label"], color=_color(header["priority_variant"]))
                if header["category"]:
                    ui.badge(header["category"], color="grey-6")
            ui.label(header["due_label"]).classes(f"text-{_color(header['tone'])}")
            ui.label(" · ".join(p for p in (header["difficulty"], header["estimated_time"]) if p))

            costs = vm.cost_summary()
            if costs is not None:
                with ui.card().classes("kept-card w-full"):
                    ui.label(f"DIY: {costs.diy_range}")
                    ui.label(f"Pro: {costs.pro_range}")
                    if costs.savings_label:
                        ui.label(costs.savings_label).classes("text-positive")

            for section in vm.sections():
                title = f"{section.title} ({section.badge})" if section.badge else section.title
                with ui.expansion(
                    title,
                    value=section.expanded,
                    on_value_change=lambda _, k=section.key: toggle(k),
                ).classes("w-full kept-card"):
                    for item in section.items:
                        ui.label(item)

            if not header["is_completed"]:
                with ui.row().classes("q-gutter-sm"):
                    ui.button("I did it myself", on_click=lambda: vm.complete(was_diy=True))
                    ui.button("A pro did it", on_click=lambda: vm.complete(was_diy=False)).props("outline")
                    ui.button(
                        f"Snooze {vm.snooze_days} days", on_click=vm.snooze
                    ).props("flat")

    # ------------------------------------------------------------------
    # Systems
    # ------------------------------------------------------------------
    @ui.page("/systems")
    def systems_page() -> None:
        if redirect_to_onboarding():
            return
        vm = SystemsVM()
        try:
            home = runtime.active_home()
            vm.set_home(home)
            vm.set_systems(runtime.query(runtime.backend.get_home_systems, home.id if home else None))
        except UseCaseError as exc:
            _notify_error(exc)

        @ui.refreshable
        def render() -> None:
            ui.select(
                dict(vm.category_options()),
                value=vm.category,
                label="Category",
                on_change=lambda e: (vm.set_category(e.value or ""), render.refresh()),
            ).classes("w-48")
            if vm.is_skipped:
                _render_empty(vm.empty_state(), "/onboarding/home")
                return
            if vm.is_loading:
                ui.spinner()
                return
            rows = vm.rows()
            if not rows:
                _render_empty(vm.empty_state(), "/onboarding/systems")
            for row in rows:
                with ui.card().classes("kept-card w-full cursor-pointer").on(
                    "click", lambda _, s=row.system_id: ui.navigate.to(f"/systems/{s}")
                ):
                    with ui.row().classes("w-full items-center justify-between"):
                        ui.label(row.name).classes("text-subtitle1")
                        ui.badge(row.grade_label, color=_color(row.grade_variant))
                    ui.badge(row.category_badge, color="grey-6")
                    ui.label(" ".join(p for p in (row.age_label, row.lifespan_label) if p)).classes("kept-muted")
                    if row.manufacturer_label:
                        ui.label(row.manufacturer_label).classes("text-caption")
                    if row.needs_attention:
                        ui.label("Needs attention").classes("text-negative text-caption")

        with _frame("Systems"):
            render()

    @ui.page("/systems/{system_id}")
    def system_detail_page(system_id: str) -> None:
        vm = SystemDetailVM(due_soon_days=due_soon_days())
        try:
            backend = runtime.backend
            vm.set_system(runtime.query(backend.get_system, system_id))
            vm.set_tasks(runtime.query(backend.get_tasks_for_system, system_id, include_completed=True))
            vm.set_issues(runtime.query(backend.get_issues_for_system, system_id))
            vm.set_templates(runtime.query(backend.get_templates_for_system_type, vm.system_type_id))
        except UseCaseError as exc:
            _notify_error(exc)

        def task_rows(rows) -> None:
            for row in rows:
                with ui.row().classes("w-full justify-between"):
                    ui.link(row.name, f"/care/{row.task_id}")
                    ui.label(row.date_label).classes("text-negative" if row.is_overdue else "kept-muted")

        def issue_cards(limit: Optional[int] = None) -> None:
            for card in vm.issue_cards(limit):
                with ui.card().classes("kept-card w-full"):
                    with ui.row().classes("w-full justify-between"):
                        ui.label(card.name).classes("text-subtitle1")
                        ui.badge(card.severity, color=_color(card.severity_tone))
                    ui.label(card.risk_label).classes(f"text-{_color(card.risk_tone)}")
                    if card.description:
                        ui.label(card.description).classes("kept-muted")
                    for text in (card.timeline, card.cost_range, card.diy_label):
                        if text:
                            ui.label(text).classes("text-caption")

        @ui.refreshable
        def render() -> None:
            if vm.is_loading:
                ui.spinner()
                return
            header = vm.header()
            with ui.card().classes("kept-card w-full"):
                ui.label(header["name"]).classes("text-h6")
                ui.label(str(header["score"])).classes("text-h4")
                for text in (header["installed_label"], header["age_label"]):
                    if text:
                        ui.label(text).classes("kept-muted")
                ui.label(
                    f"{header['active_count']} active · {header['overdue_count']} overdue · "
                    f"{header['completed_count']} completed"
                )
            ui.toggle(
                {key: label for key, label in DETAIL_TABS},
                value=vm.active_tab,
                on_change=lambda e: (vm.set_tab(e.value), render.refresh()),
            )
            if vm.active_tab == "overview":
                lifecycle = vm.lifecycle()
                if lifecycle is not None:
                    with ui.card().classes("kept-card w-full"):
                        ui.label(f"Remaining life: {lifecycle['remaining_label']}")
                        ui.linear_progress(
                            value=lifecycle["remaining_percent"] / 100, show_value=False
                        ).props(f"color={_color(lifecycle['tone'])}")
                        ui.label(f"Replacement: {lifecycle['replacement_year']} {lifecycle['replacement_cost']}")
                ui.label("Upcoming").classes("text-subtitle1")
                task_rows(vm.upcoming_preview())
                ui.label(vm.risks_title()).classes("text-subtitle1")
                issue_cards(limit=2)
            elif vm.active_tab == "tasks":
                if vm.has_no_tasks:
                    ui.label("No maintenance tasks for this system yet.").classes("kept-muted")
                task_rows(vm.active_rows())
                completed = vm.completed_rows()
                if completed:
                    ui.label("Completed").classes("text-subtitle1")
                    task_rows(completed)
            elif vm.active_tab == "issues":
                ui.label(vm.issues_intro()).classes("kept-muted")
                issue_cards()
            else:
                ui.label(vm.library_intro()).classes("kept-muted")
                for guide in vm.guide_cards():
                    with ui.card().classes("kept-card w-full"):
                        ui.label(guide.name).classes("text-subtitle1")
                        if guide.description:
                            ui.label(guide.description).classes("kept-muted")
                        ui.label(" · ".join(p for p in (guide.difficulty, guide.estimated_time) if p))

        with _frame("System", back="/systems", nav=False):
            render()

    # ------------------------------------------------------------------
    # Forecast
    # ------------------------------------------------------------------
    @ui.page("/forecast")
    def forecast_page() -> None:
        if redirect_to_onboarding():
            return
        vm = ForecastVM()
        home_id: Optional[str] = None

        def load_forecast() -> None:
            try:
                vm.set_forecast(runtime.query(runtime.backend.get_budget_forecast, home_id, vm.time_range))
            except UseCaseError as exc:
                _notify_error(exc)

        try:
            home = runtime.active_home()
            home_id = home.id if home else None
            vm.set_confidence(runtime.query(runtime.backend.get_forecast_confidence, home_id))
        except UseCaseError as exc:
            _notify_error(exc)
        load_forecast()

        def change_range(years: int) -> None:
            if vm.set_time_range(years):
                load_forecast()
            render.refresh()

        @ui.refreshable
        def render() -> None:
            ui.toggle(
                {years: time_range_label(years) for years in TIME_RANGES},
                value=vm.time_range,
                on_change=lambda e: change_range(int(e.value)),
            )
            confidence = vm.confidence_card()
            if confidence is not None:
                with ui.card().classes("kept-card w-full"):
                    ui.label(f"Forecast confidence {confidence['score_label']}")
                    ui.linear_progress(value=confidence["score"] / 100, show_value=False).props(
                        f"color={_color(confidence['tone'])}"
                    )
                    if confidence["description"]:
                        ui.label(confidence["description"]).classes("kept-muted")
                    for line in confidence["improvements"]:
                        ui.label(line).classes("text-caption")
            if vm.is_skipped:
                _render_empty(vm.empty_state(), "/onboarding/home")
                return
            if vm.is_loading:
                ui.spinner()
                return
            with ui.card().classes("kept-card w-full"):
                ui.label(vm.summary_title).classes("kept-muted")
                ui.label(vm.total_label()).classes("text-h4")
                for item in vm.breakdown():
                    with ui.row().classes("w-full justify-between"):
                        ui.label(item.label)
                        ui.label(f"{item.amount} ({item.percent}%)")
                if vm.diy_savings_label():
                    ui.label(vm.diy_savings_label()).classes("text-positive")
            if vm.show_budget_planner:
                with ui.card().classes("kept-card w-full"):
                    ui.toggle(
                        {period: period.capitalize() for period in BUDGET_PERIODS},
                        value=vm.budget_period,
                        on_change=lambda e: (vm.set_budget_period(e.value), render.refresh()),
                    )
                    ui.label(f"{vm.budget_label()} {vm.budget_period_label()}").classes("text-h6")
            if vm.show_insights:
                with ui.card().classes("kept-card w-full"):
                    ui.label("Insights").classes("text-subtitle1")
                    for line in vm.insight_lines():
                        ui.label(line)
            for bar in vm.year_bars():
                with ui.row().classes("w-full items-center"):
                    ui.label(bar.year).classes("w-12")
                    ui.linear_progress(value=bar.width_percent / 100, show_value=False).classes("w-64")
                    ui.label(bar.total)

        with _frame("Forecast"):
            render()

    # ------------------------------------------------------------------
    # Packets and troubleshooting
    # ------------------------------------------------------------------
    @ui.page("/packets")
    def packets_page() -> None:
        if redirect_to_onboarding():
            return
        vm = PacketsVM(on_share=_share_done, on_alert=_alert)
        try:
            home = runtime.active_home()
            vm.set_packets(runtime.query(runtime.backend.get_home_packets, home.id if home else None))
            vm.share_packet = runtime.controller.uc_share_packet
        except UseCaseError as exc:
            _notify_error(exc)

        with _frame("Packets"):
            ui.button("New Packet", on_click=lambda: ui.navigate.to("/troubleshoot"))
            if vm.is_skipped:
                _render_empty(vm.empty_state(), "/onboarding/home")
                return
            if vm.is_loading:
                ui.spinner()
                return
            _render_empty(vm.empty_state(), "/troubleshoot")
            for card in vm.cards():
                with ui.card().classes("kept-card w-full"):
                    with ui.row().classes("w-full justify-between"):
                        ui.link(card.title or card.symptom, f"/packet/{card.packet_id}").classes("text-subtitle1")
                        ui.label(card.age_label).classes("kept-muted")
                    for text in (card.system_label, card.likely_issue, card.views_label):
                        if text:
                            ui.label(text).classes("text-caption")
                    ui.button(
                        "Share",
                        on_click=lambda _, p=card.packet_id: vm.share(p),
                    ).props("flat dense")

    @ui.page("/packet/new")
    def new_packet_page(symptom: str = "") -> None:
        vm = NewPacketVM(on_alert=_alert, on_created=ui.navigate.to, symptom=symptom)
        try:
            home = runtime.active_home()
            vm.set_home_id(home.id if home else None)
            vm.set_systems(runtime.query(runtime.backend.get_home_systems, vm.home_id))
            vm.create_packet = runtime.controller.uc_create_packet
        except UseCaseError as exc:
            _notify_error(exc)

        with _frame("New Packet", back="/troubleshoot", nav=False):
            ui.input(
                "What's going on?",
                value=vm.symptom,
                on_change=lambda e: setattr(vm, "symptom", str(e.value or "")),
            ).classes("w-full")
            ui.select(
                {value: label for value, label, _ in vm.system_options()},
                value="",
                label="Which system?",
                on_change=lambda e: vm.select_system(e.value or None),
            ).classes("w-full")
            ui.textarea(
                "Details (optional)",
                on_change=lambda e: setattr(vm, "description", str(e.value or "")),
            ).classes("w-full")
            ui.button("Create Packet", on_click=vm.create)

    @ui.page("/packet/{packet_id}")
    def packet_detail_page(packet_id: str) -> None:
        vm = PacketDetailVM(on_share=_share_done, on_alert=_alert)
        try:
            vm.set_packet(runtime.query(runtime.backend.get_packet, packet_id))
            vm.share_packet = runtime.controller.uc_share_packet
        except UseCaseError as exc:
            _notify_error(exc)

        with _frame("Packet", back="/packets", nav=False):
            packet = vm.current
            if packet is None:
                ui.spinner()
                return
            ui.label(packet.title or packet.symptom).classes("text-h6")
            ui.label(vm.meta_line()).classes("kept-muted")
            for label, value in vm.system_info():
                with ui.row().classes("w-full justify-between"):
                    ui.label(label).classes("kept-muted")
                    ui.label(value)
            diagnosis = vm.diagnosis()
            if diagnosis is not None:
                with ui.card().classes("kept-card w-full"):
                    ui.label(diagnosis["likely_issue"]).classes("text-subtitle1")
                    if diagnosis["confidence"]:
                        ui.label(diagnosis["confidence"]).classes("kept-muted")
                    ui.label(diagnosis["explanation"])
                    for cause in diagnosis["alternatives"]:
                        ui.label(f"- {cause}").classes("text-caption")
            cost = vm.cost_estimate()
            if cost is not None:
                with ui.card().classes("kept-card w-full"):
                    ui.label(f"DIY: {cost['diy']}")
                    ui.label(f"Pro: {cost['pro']}")
                    for factor in cost["factors"]:
                        ui.label(f"- {factor}").classes("text-caption")
            questions = vm.questions()
            if questions:
                ui.label("Questions to ask").classes("text-subtitle1")
                for question in questions:
                    ui.label(question)
            flags = vm.red_flags()
            if flags:
                ui.label("Red flags").classes("text-subtitle1 text-negative")
                for flag in flags:
                    ui.label(f"- {flag}")
            ui.button("Share Packet", on_click=vm.share)

    @ui.page("/troubleshoot")
    def troubleshoot_page() -> None:
        vm = TroubleshootVM()
        try:
            home = runtime.active_home()
            vm.set_systems(runtime.query(runtime.backend.get_home_systems, home.id if home else None))
        except UseCaseError as exc:
            _notify_error(exc)

        def go() -> None:
            path = vm.continue_path()
            if path:
                ui.navigate.to(path)

        @ui.refreshable
        def render() -> None:
            with ui.row().classes("w-full q-gutter-sm"):
                for symptom in COMMON_SYMPTOMS:
                    ui.button(
                        symptom.label,
                        icon=symptom.icon,
                        color="primary" if vm.selected_id == symptom.id else "grey-4",
                        on_click=lambda _, s=symptom.id: (vm.select(s), render.refresh()),
                    ).props("unelevated")
            if vm.shows_custom_input:
                ui.input(
                    "Describe the issue",
                    value=vm.custom_symptom,
                    on_change=lambda e: setattr(vm, "custom_symptom", str(e.value or "")),
                ).classes("w-full")
            ui.button("Continue", on_click=go)
            links = vm.system_links()
            if links:
                ui.label("Or start from a system").classes("text-subtitle1")
                for system_id, name in links:
                    ui.link(name, f"/systems/{system_id}")

        with _frame("What's wrong?", back="/", nav=False):
            render()

    # ------------------------------------------------------------------
    # Onboarding
    # ------------------------------------------------------------------
    @ui.page("/onboarding")
    def onboarding_welcome_page() -> None:
        with _frame("Welcome to Kept", nav=False):
            ui.label("Track maintenance, forecast costs and get ahead of repairs.")
            ui.button("Get Started", on_click=lambda: ui.navigate.to(ROUTE_HOME))

    @ui.page("/onboarding/home")
    def onboarding_home_page() -> None:
        vm = OnboardingHomeVM(on_navigate=ui.navigate.to)
        try:
            vm.session = runtime.onboarding_session()
            vm.save_home = runtime.controller.uc_save_onboarding_home
        except UseCaseError as exc:
            _notify_error(exc)

        @ui.refreshable
        def error_line() -> None:
            if vm.error_message:
                ui.label(vm.error_message).classes("text-negative")

        def submit() -> None:
            vm.submit()
            error_line.refresh()

        with _frame("Your Home", back="/onboarding", nav=False):
            error_line()
            for key, label, placeholder in HOME_FORM_FIELDS:
                ui.input(
                    label,
                    placeholder=placeholder,
                    value=getattr(vm.form, key),
                    on_change=lambda e, k=key: vm.set_field(k, str(e.value or "")),
                ).classes("w-full")
            ui.button("Continue", on_click=submit)

    @ui.page("/onboarding/systems")
    def onboarding_systems_page() -> None:
        vm = OnboardingSystemsVM(on_navigate=ui.navigate.to)
        try:
            vm.session = runtime.onboarding_session()
            vm.save_selection = runtime.controller.uc_save_system_selection
            vm.set_catalog(runtime.query(runtime.backend.get_system_types))
        except UseCaseError as exc:
            _notify_error(exc)

        @ui.refreshable
        def render() -> None:
            if vm.is_loading:
                ui.spinner()
                return
            for category, entries in vm.groups():
                ui.label(category).classes("text-caption kept-muted")
                for type_id, name, selected in entries:
                    ui.checkbox(
                        name,
                        value=selected,
                        on_change=lambda _, t=type_id: (vm.toggle(t), render.refresh()),
                    )
            if vm.error_message:
                ui.label(vm.error_message).classes("text-negative")
            ui.button("Continue", on_click=lambda: (vm.continue_(), render.refresh())).set_enabled(
                vm.can_continue
            )

        with _frame("Your Systems", back=ROUTE_HOME, nav=False):
            render()

    @ui.page("/onboarding/dates")
    def onboarding_dates_page() -> None:
        vm = OnboardingDatesVM(on_navigate=ui.navigate.to)
        try:
            vm.session = runtime.onboarding_session()
            vm.finish_onboarding = runtime.controller.uc_finish_onboarding
            vm.set_catalog(runtime.query(runtime.backend.get_system_types))
        except UseCaseError as exc:
            _notify_error(exc)

        @ui.refreshable
        def error_line() -> None:
            if vm.error_message:
                ui.label(vm.error_message).classes("text-negative")

        def finish() -> None:
            vm.finish()
            error_line.refresh()

        with _frame("Install Years", back="/onboarding/systems", nav=False):
            ui.label("Roughly when was each system installed? Leave blank if unsure.").classes("kept-muted")
            years = vm.year_inputs()
            for system_type in vm.selected_types():
                ui.input(
                    system_type.name,
                    placeholder="e.g. 2015",
                    value=years.get(system_type.id, ""),
                    on_change=lambda e, t=system_type.id: vm.set_year(t, str(e.value or "")),
                ).classes("w-full")
            error_line()
            ui.button("Finish Setup", on_click=finish)

    @ui.page("/onboarding/complete")
    def onboarding_complete_page() -> None:
        with _frame("You're all set", nav=False):
            ui.label("Your home is ready. We'll keep track of what needs attention.")
            ui.button("Go to Dashboard", on_click=lambda: ui.navigate.to("/"))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    @ui.page("/settings")
    def settings_page() -> None:
        vm = SettingsScreenVM()
        web_settings = WebSettingsVM.from_settings_vm(runtime.settings_vm)
        try:
            backend = runtime.backend
            vm.set_profile(runtime.query(backend.get_current_profile))
            vm.set_subscription(runtime.query(backend.get_user_subscription))
            resolved = runtime.resolve_home()
            vm.set_homes(resolved.homes, resolved.active_home)
        except UseCaseError as exc:
            _notify_error(exc)

        async def save_connection() -> None:
            try:
                payload = web_settings.to_payload()
                runtime.apply_settings_payload(payload)
                runtime.save_settings()
                dumped = json.dumps(payload, ensure_ascii=False)
                await ui.run_javascript(
                    f"localStorage.setItem({json.dumps(BROWSER_SETTINGS_KEY)}, {json.dumps(dumped)});"
                )
                ui.notify("Settings saved.", color="positive")
            except (ValueError, OSError, UseCaseError) as exc:
                _notify_error(exc)

        def export_settings_json() -> None:
            ui.download(
                json.dumps(web_settings.to_payload(), ensure_ascii=False, indent=2).encode("utf-8"),
                filename="kept_settings.json",
            )

        with _frame("Settings"):
            profile = vm.profile_card()
            if profile is not None:
                with ui.card().classes("kept-card w-full"):
                    with ui.row().classes("items-center"):
                        ui.avatar(profile["avatar"], color="primary")
                        with ui.column():
                            ui.label(profile["name"]).classes("text-subtitle1")
                            ui.label(profile["email"]).classes("kept-muted")
                    with ui.row().classes("items-center"):
                        ui.label("Current Plan")
                        ui.badge(profile["tier_label"], color=_color(profile["tier_variant"]))
                    if profile["show_upgrade"]:
                        ui.button(
                            profile["upgrade_label"],
                            on_click=lambda: ui.navigate.to("/settings/subscription"),
                        )
                    line = vm.subscription_line()
                    if line:
                        ui.label(line).classes("kept-muted")
            home = vm.home_card()
            if home is not None:
                with ui.card().classes("kept-card w-full"):
                    ui.label(home["name"]).classes("text-subtitle1")
                    ui.label(home["address"]).classes("kept-muted")
                    if home["others"]:
                        ui.label(home["others"]).classes("text-caption")
            with ui.column():
                ui.link("Home Details", "/settings/home-details")
                ui.link("Manage Systems", "/onboarding/systems")
                ui.link("Subscription", "/settings/subscription")
            with ui.expansion("Connection").classes("w-full kept-card"):
                ui.input("Backend URL", value=web_settings.backend_url, on_change=lambda e: setattr(web_settings, "backend_url", str(e.value or "").strip())).props("dense outlined").classes("w-full")
                ui.input("Auth token", value=web_settings.auth_token, password=True, on_change=lambda e: setattr(web_settings, "auth_token", str(e.value or ""))).props("dense outlined").classes("w-full")
                with ui.row().classes("q-gutter-sm"):
                    ui.number("Request timeout (s)", value=web_settings.request_timeout_s, on_change=lambda e: setattr(web_settings, "request_timeout_s", int(e.value or 10))).props("dense outlined")
                    ui.number("Read retries", value=web_settings.retries, on_change=lambda e: setattr(web_settings, "retries", int(e.value or 0))).props("dense outlined")
                    ui.number("Due soon (days)", value=web_settings.due_soon_days, on_change=lambda e: setattr(web_settings, "due_soon_days", int(e.value or 7))).props("dense outlined")
                    ui.number("Snooze (days)", value=web_settings.snooze_days, on_change=lambda e: setattr(web_settings, "snooze_days", int(e.value or 7))).props("dense outlined")
                ui.input("Storage directory", value=web_settings.storage_dir, on_change=lambda e: setattr(web_settings, "storage_dir", str(e.value or "."))).props("dense outlined").classes("w-full")
                ui.input("Share base URL", value=web_settings.share_base_url, on_change=lambda e: setattr(web_settings, "share_base_url", str(e.value or ""))).props("dense outlined").classes("w-full")
                ui.checkbox("Enable debug logging", value=web_settings.debug_logging, on_change=lambda e: setattr(web_settings, "debug_logging", bool(e.value)))
                with ui.row().classes("q-gutter-sm"):
                    ui.button("Save", on_click=save_connection, color="primary")
                    ui.button("Export JSON", on_click=export_settings_json)
            with ui.column():
                ui.link("Contact Support", f"mailto:{SUPPORT_EMAIL}")
                ui.link("Help Center", HELP_URL, new_tab=True)
                ui.link("Privacy Policy", PRIVACY_URL, new_tab=True)
                ui.link("Terms of Service", TERMS_URL, new_tab=True)
            with ui.column().classes("w-full items-center"):
                ui.label("Kept").classes("text-subtitle1")
                ui.label(f"Version {APP_VERSION}").classes("kept-muted")
                ui.label("Home Intelligence, kept simple.").classes("text-caption")

    @ui.page("/settings/home-details")
    def home_details_page() -> None:
        vm = HomeDetailsVM(on_alert=_alert, on_back=lambda: ui.navigate.to("/settings"))
        try:
            vm.set_home(runtime.active_home())
            vm.update_home = runtime.controller.uc_update_home
        except UseCaseError as exc:
            _notify_error(exc)

        with _frame("Home Details", back="/settings", nav=False):
            if vm.is_loading:
                ui.label("No home yet.").classes("kept-muted")
                return
            stats = vm.stats()
            with ui.row().classes("q-gutter-md"):
                ui.label(f"{stats['systems']} systems")
                ui.label(f"Health {stats['health_score']}")
            for key, label, placeholder in HOME_FORM_FIELDS:
                ui.input(
                    label,
                    placeholder=placeholder,
                    value=getattr(vm.form, key),
                    on_change=lambda e, k=key: vm.set_field(k, str(e.value or "")),
                ).classes("w-full")
            ui.button("Save Changes", on_click=vm.save)

    @ui.page("/settings/subscription")
    def subscription_page() -> None:
        vm = SubscriptionVM()
        try:
            backend = runtime.backend
            vm.set_profile(runtime.query(backend.get_current_profile))
            vm.set_subscription(runtime.query(backend.get_user_subscription))
        except UseCaseError as exc:
            _notify_error(exc)

        with _frame("Subscription", back="/settings", nav=False):
            if vm.is_loading:
                ui.spinner()
                return
            ui.label(f"Current plan: {vm.current_plan_name()}").classes("text-subtitle1")
            renewal = vm.renewal_line()
            if renewal:
                ui.label(renewal).classes("kept-muted")
            for card in vm.cards():
                with ui.card().classes("kept-card w-full"):
                    with ui.row().classes("items-center justify-between w-full"):
                        ui.label(card.tier.name).classes("text-h6")
                        if card.tier.recommended:
                            ui.badge("Most Popular", color="primary")
                        if card.is_current:
                            ui.badge("Current", color="positive")
                    ui.label(card.price_label)
                    for feature in card.tier.features:
                        ui.label(f"+ {feature}")
                    for limitation in card.tier.limitations:
                        ui.label(f"- {limitation}").classes("kept-muted")
                    if card.can_upgrade:
                        ui.button(
                            f"Upgrade to {card.tier.name}",
                            on_click=lambda _, t=card.tier.id: ui.navigate.to(vm.upgrade_url(t), new_tab=True),
                        )
                    if card.can_manage:
                        ui.button(
                            "Manage Subscription",
                            on_click=lambda: ui.navigate.to(vm.billing_url(), new_tab=True),
                        ).props("outline")


def _parse_args() -> argparse.Namespace:
    """Parse CLI args for web runtime startup."""
    parser = argparse.ArgumentParser(description="Run the Kept NiceGUI web UI.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--smoke-test", action="store_true")
    return parser.parse_args()


def main() -> None:
    """CLI entrypoint for the NiceGUI runtime."""
    args = _parse_args()
    configure_root()
    runtime = WebRuntime()
    if args.smoke_test:
        payload = runtime.settings_payload()
        print("web-smoke-ok", sorted(payload.keys()))
        return
    _build_ui(runtime)
    ui.run(
        host=args.host,
        port=args.port,
        title="Kept",
        reload=args.reload,
        show=False,
        storage_secret=os.environ.get("KEPT_WEB_STORAGE_SECRET", "kept-web-ui-secret"),
    )


if __name__ == "__main__":
    main()
