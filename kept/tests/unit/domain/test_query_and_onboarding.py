from __future__ import annotations

from datetime import datetime, timedelta, timezone

from kept.domain.onboarding import OnboardingSession, normalize_install_year
from kept.domain.query import QueryResult, QueryState
from kept.domain.time_utils import ensure_aware, parse_backend_datetime


def test_query_result_states() -> None:
    skipped: QueryResult[list] = QueryResult.skipped()
    pending: QueryResult[list] = QueryResult.pending()
    resolved = QueryResult.resolved([])

    assert skipped.is_skipped and not skipped.is_loading
    assert pending.is_loading and pending.state == QueryState.PENDING
    assert resolved.is_resolved
    assert resolved.data_or(["fallback"]) == []
    assert pending.data_or(["fallback"]) == ["fallback"]


def test_query_result_map_keeps_state() -> None:
    assert QueryResult.resolved(2).map(lambda v: v * 3).value == 6
    assert QueryResult.skipped().map(lambda v: v).is_skipped


def test_parse_backend_datetime_variants() -> None:
    assert parse_backend_datetime("2026-03-05") == datetime(2026, 3, 5, tzinfo=timezone.utc)
    assert parse_backend_datetime("2026-03-05T10:00:00Z") == datetime(
        2026, 3, 5, 10, tzinfo=timezone.utc
    )
    assert parse_backend_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_backend_datetime(True) is None
    assert parse_backend_datetime("   ") is None
    assert parse_backend_datetime("next week") is None
    assert parse_backend_datetime("2026-03-05T10:00:00").tzinfo is not None


def test_ensure_aware_defaults_to_now() -> None:
    before = datetime.now(timezone.utc) - timedelta(seconds=1)

    assert ensure_aware(None) >= before
    assert ensure_aware(datetime(2026, 1, 1)).tzinfo is not None


def test_normalize_install_year() -> None:
    assert normalize_install_year(" 2015 ") == "2015"
    assert normalize_install_year("15") is None
    assert normalize_install_year("20x5") is None
    assert normalize_install_year(None) is None


def test_session_dedupes_and_toggles_selection() -> None:
    session = OnboardingSession(system_type_ids=("a", "b", "a", " "))

    assert session.system_type_ids == ("a", "b")
    toggled = session.toggle_system_type("a").toggle_system_type("c")
    assert toggled.system_type_ids == ("b", "c")
    assert session.system_type_ids == ("a", "b")


def test_session_install_dates() -> None:
    session = (
        OnboardingSession(home_id="home_1", system_type_ids=("a", "b", "c"))
        .with_install_year("a", " 2012 ")
        .with_install_year("b", "12")
        .with_install_year("c", None)
    )

    assert session.install_date_for("a") == "2012-01-01"
    assert session.install_date_for("b") is None
    assert session.install_date_for("c") is None
    assert session.install_date_for("missing") is None


def test_session_emptiness() -> None:
    assert OnboardingSession().is_empty
    assert not OnboardingSession().with_home_id("home_1").is_empty
    assert OnboardingSession(home_id="home_1").with_home_id("").home_id is None
