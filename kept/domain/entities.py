"""Read-only projections of backend records consumed by view models.

Every entity is built from a raw backend mapping through ``from_payload``.
Backend documents carry their identifier in ``_id`` and use camelCase keys;
the projections expose snake_case attributes and tolerate missing fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

HomeId = str
SystemId = str
SystemTypeId = str
TaskId = str
PacketId = str


def _text(payload: Mapping[str, Any], key: str, default: str = "") -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else default


def _opt_text(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _opt_int(payload: Mapping[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _int(payload: Mapping[str, Any], key: str) -> int:
    value = _opt_int(payload, key)
    return value if value is not None else 0


def _number(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _opt_number(payload: Mapping[str, Any], key: str) -> Optional[float]:
    if payload.get(key) is None:
        return None
    return _number(payload, key)


def _mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item).strip() for item in value if isinstance(item, str) and item.strip())


@dataclass(frozen=True)
class Home:
    """A home owned by the signed-in user."""

    id: HomeId
    name: str = ""
    address_line1: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    year_built: Optional[int] = None
    square_footage: Optional[int] = None
    overall_health_score: Optional[float] = None
    systems_count: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Home":
        return cls(
            id=_text(payload, "_id"),
            name=_text(payload, "name"),
            address_line1=_text(payload, "addressLine1"),
            city=_text(payload, "city"),
            state=_text(payload, "state"),
            zip_code=_text(payload, "zipCode"),
            year_built=_opt_int(payload, "yearBuilt"),
            square_footage=_opt_int(payload, "squareFootage"),
            overall_health_score=_opt_number(payload, "overallHealthScore"),
            systems_count=_int(payload, "systemsCount"),
        )

    @property
    def display_name(self) -> str:
        return self.name or "My Home"


@dataclass(frozen=True)
class SystemType:
    """Catalog entry for a kind of home system (furnace, water heater, ...)."""

    id: SystemTypeId
    name: str = ""
    category: str = ""
    default_lifespan_years: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SystemType":
        return cls(
            id=_text(payload, "_id"),
            name=_text(payload, "name"),
            category=_text(payload, "category"),
            default_lifespan_years=_opt_int(payload, "defaultLifespanYears"),
        )


@dataclass(frozen=True)
class HomeSystem:
    """A concrete system installed in a home."""

    id: SystemId
    home_id: HomeId = ""
    system_type_id: SystemTypeId = ""
    name: str = ""
    install_date: Optional[str] = None
    health_score: Optional[float] = None
    system_type: Optional[SystemType] = None
    manufacturer: str = ""
    model_number: str = ""
    needs_attention: bool = False
    remaining_life_percent: Optional[float] = None
    estimated_replacement_year: Optional[int] = None
    estimated_replacement_cost: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "HomeSystem":
        type_payload = _mapping(payload.get("systemType"))
        return cls(
            id=_text(payload, "_id"),
            home_id=_text(payload, "homeId"),
            system_type_id=_text(payload, "systemTypeId"),
            name=_text(payload, "name"),
            install_date=_opt_text(payload, "installDate"),
            health_score=_opt_number(payload, "healthScore"),
            system_type=SystemType.from_payload(type_payload) if type_payload else None,
            manufacturer=_text(payload, "manufacturer"),
            model_number=_text(payload, "modelNumber"),
            needs_attention=bool(payload.get("needsAttention")),
            remaining_life_percent=_opt_number(payload, "remainingLifePercent"),
            estimated_replacement_year=_opt_int(payload, "estimatedReplacementYear"),
            estimated_replacement_cost=_opt_number(payload, "estimatedReplacementCost"),
        )

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.system_type and self.system_type.name:
            return self.system_type.name
        return "System"

    @property
    def category(self) -> str:
        return self.system_type.category if self.system_type else ""


@dataclass(frozen=True)
class TaskTemplate:
    """Maintenance template attached to a scheduled task (DIY guide metadata)."""

    id: str = ""
    name: str = ""
    description: str = ""
    difficulty: Optional[str] = None
    estimated_time_minutes: Optional[int] = None
    quick_skim: Tuple[str, ...] = ()
    when_to_call_pro: Tuple[str, ...] = ()
    diy_steps: Tuple[str, ...] = ()
    safety_warnings: Tuple[str, ...] = ()
    common_mistakes: Tuple[str, ...] = ()
    why_it_matters: Optional[str] = None
    science_behind: Optional[str] = None
    pro_tips: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TaskTemplate":
        deep_dive = _mapping(payload.get("deepDiveContent")) or {}
        return cls(
            id=_text(payload, "_id"),
            name=_text(payload, "name"),
            description=_text(payload, "description"),
            difficulty=_opt_text(payload, "difficulty"),
            estimated_time_minutes=_opt_int(payload, "estimatedTimeMinutes"),
            quick_skim=_str_tuple(payload.get("quickSkim")),
            when_to_call_pro=_str_tuple(payload.get("whenToCallPro")),
            diy_steps=_str_tuple(payload.get("diySteps")),
            safety_warnings=_str_tuple(payload.get("safetyWarnings")),
            common_mistakes=_str_tuple(payload.get("commonMistakes")),
            why_it_matters=_opt_text(deep_dive, "whyItMatters"),
            science_behind=_opt_text(deep_dive, "scienceBehind"),
            pro_tips=_str_tuple(deep_dive.get("proTips")),
        )

    @property
    def has_deep_dive(self) -> bool:
        return bool(self.why_it_matters or self.science_behind)


@dataclass(frozen=True)
class MaintenanceTask:
    """Scheduled maintenance task as returned by the enhanced task queries."""

    id: TaskId
    name: str = ""
    status: str = ""
    due_date: str = ""
    category: str = ""
    priority: Optional[str] = None
    pro_cost_low: float = 0.0
    pro_cost_high: float = 0.0
    diy_cost_low: float = 0.0
    diy_cost_high: float = 0.0
    completed_date: Optional[str] = None
    system: Optional[HomeSystem] = None
    template: Optional[TaskTemplate] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MaintenanceTask":
        system_payload = _mapping(payload.get("system"))
        template_payload = _mapping(payload.get("template"))
        return cls(
            id=_text(payload, "_id"),
            name=_text(payload, "name"),
            status=_text(payload, "status").lower(),
            due_date=_text(payload, "dueDate"),
            category=_text(payload, "category"),
            priority=_opt_text(payload, "priority"),
            pro_cost_low=_number(payload, "proCostLow"),
            pro_cost_high=_number(payload, "proCostHigh"),
            diy_cost_low=_number(payload, "diyCostLow"),
            diy_cost_high=_number(payload, "diyCostHigh"),
            completed_date=_opt_text(payload, "completedDate"),
            system=HomeSystem.from_payload(system_payload) if system_payload else None,
            template=TaskTemplate.from_payload(template_payload) if template_payload else None,
        )

    @property
    def pro_cost_mean(self) -> float:
        return (self.pro_cost_low + self.pro_cost_high) / 2

    @property
    def diy_cost_mean(self) -> float:
        return (self.diy_cost_low + self.diy_cost_high) / 2

    @property
    def difficulty(self) -> Optional[str]:
        return self.template.difficulty if self.template else None

    @property
    def system_name(self) -> str:
        return self.system.display_name if self.system else ""


@dataclass(frozen=True)
class TaskStats:
    overdue: int = 0
    due: int = 0
    upcoming: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TaskStats":
        return cls(
            overdue=_int(payload, "overdue"),
            due=_int(payload, "due"),
            upcoming=_int(payload, "upcoming"),
        )


@dataclass(frozen=True)
class Issue:
    """Known failure mode of a system with its age-based likelihood."""

    id: str
    system_id: SystemId = ""
    title: str = ""
    status: str = ""
    severity: Optional[str] = None
    reported_at: Optional[str] = None
    description: str = ""
    current_probability: int = 0
    probability_3yr: int = 0
    probability_5yr: int = 0
    repair_cost_low: float = 0.0
    repair_cost_high: float = 0.0
    is_diy_fixable: bool = False
    diy_difficulty: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Issue":
        return cls(
            id=_text(payload, "_id"),
            system_id=_text(payload, "systemId"),
            title=_text(payload, "issueName") or _text(payload, "title"),
            status=_text(payload, "status"),
            severity=_opt_text(payload, "severity"),
            reported_at=_opt_text(payload, "reportedAt"),
            description=_text(payload, "description"),
            current_probability=_int(payload, "currentProbability"),
            probability_3yr=_int(payload, "probability3yr"),
            probability_5yr=_int(payload, "probability5yr"),
            repair_cost_low=_number(payload, "repairCostLow"),
            repair_cost_high=_number(payload, "repairCostHigh"),
            is_diy_fixable=bool(payload.get("isDiyFixable")),
            diy_difficulty=_opt_text(payload, "diyDifficulty"),
        )


@dataclass(frozen=True)
class Packet:
    """Shareable bundle of diagnostic and cost content generated for a symptom."""

    id: PacketId
    home_id: HomeId = ""
    system_id: Optional[SystemId] = None
    title: str = ""
    symptom: str = ""
    description: Optional[str] = None
    created_at: Optional[int] = None
    is_shared: bool = False
    views_count: int = 0
    packet_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Packet":
        created = _opt_int(payload, "createdAt")
        if created is None:
            created = _opt_int(payload, "_creationTime")
        data = _mapping(payload.get("packetData"))
        return cls(
            id=_text(payload, "_id"),
            home_id=_text(payload, "homeId"),
            system_id=_opt_text(payload, "systemId"),
            title=_text(payload, "title"),
            symptom=_text(payload, "symptom"),
            description=_opt_text(payload, "description"),
            created_at=created,
            is_shared=bool(payload.get("isShared")),
            views_count=_int(payload, "viewsCount"),
            packet_data=dict(data) if data else {},
        )


@dataclass(frozen=True)
class UserProfile:
    id: str
    name: str = ""
    email: str = ""
    tier: str = "free"
    onboarding_completed_at: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserProfile":
        return cls(
            id=_text(payload, "_id"),
            name=_text(payload, "fullName") or _text(payload, "name"),
            email=_text(payload, "email"),
            tier=_text(payload, "tier") or "free",
            onboarding_completed_at=_opt_int(payload, "onboardingCompletedAt"),
        )

    @property
    def needs_onboarding(self) -> bool:
        return self.onboarding_completed_at is None

    @property
    def initials(self) -> str:
        source = self.name or self.email
        return source[:1].upper() or "U"


@dataclass(frozen=True)
class Subscription:
    tier: str = "free"
    status: str = ""
    current_period_end: Optional[int] = None
    cancel_at_period_end: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Subscription":
        return cls(
            tier=_text(payload, "tier") or "free",
            status=_text(payload, "status"),
            current_period_end=_opt_int(payload, "currentPeriodEnd"),
            cancel_at_period_end=bool(payload.get("cancelAtPeriodEnd")),
        )


@dataclass(frozen=True)
class ForecastSummary:
    total: float = 0.0
    per_month: float = 0.0
    per_paycheck: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ForecastSummary":
        return cls(
            total=_number(payload, "total"),
            per_month=_number(payload, "perMonth"),
            per_paycheck=_number(payload, "perPaycheck"),
        )


@dataclass(frozen=True)
class ForecastTotals:
    """Cost split of a forecast window; also used for each yearly row."""

    grand_total: float = 0.0
    maintenance: float = 0.0
    repairs: float = 0.0
    replacements: float = 0.0
    year: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ForecastTotals":
        grand = _opt_number(payload, "grandTotal")
        return cls(
            grand_total=grand if grand is not None else _number(payload, "total"),
            maintenance=_number(payload, "maintenance"),
            repairs=_number(payload, "repairs"),
            replacements=_number(payload, "replacements"),
            year=_opt_int(payload, "year"),
        )


@dataclass(frozen=True)
class ForecastInsights:
    total_diy_savings: float = 0.0
    peak_year: Optional[int] = None
    peak_amount: float = 0.0
    biggest_expense_name: str = ""
    biggest_expense_cost: float = 0.0
    upcoming_replacements: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ForecastInsights":
        biggest = _mapping(payload.get("biggestExpense")) or {}
        raw = payload.get("upcomingReplacements")
        replacements: List[Tuple[str, str]] = []
        if isinstance(raw, list):
            replacements = [
                (_text(item, "name"), str(item.get("year") or ""))
                for item in raw
                if isinstance(item, Mapping)
            ]
        return cls(
            total_diy_savings=_number(payload, "totalDiySavings"),
            peak_year=_opt_int(payload, "peakYear"),
            peak_amount=_number(payload, "peakAmount"),
            biggest_expense_name=_text(biggest, "name"),
            biggest_expense_cost=_number(biggest, "cost"),
            upcoming_replacements=tuple(replacements),
        )


@dataclass(frozen=True)
class BudgetForecast:
    years: int = 1
    summary: Optional[ForecastSummary] = None
    totals: Optional[ForecastTotals] = None
    insights: Optional[ForecastInsights] = None
    yearly_breakdown: Tuple[ForecastTotals, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BudgetForecast":
        summary = _mapping(payload.get("summary"))
        totals = _mapping(payload.get("totals"))
        insights = _mapping(payload.get("insights"))
        raw_years = payload.get("yearlyBreakdown")
        yearly: List[ForecastTotals] = []
        if isinstance(raw_years, list):
            yearly = [ForecastTotals.from_payload(y) for y in raw_years if isinstance(y, Mapping)]
        return cls(
            years=_opt_int(payload, "years") or 1,
            summary=ForecastSummary.from_payload(summary) if summary else None,
            totals=ForecastTotals.from_payload(totals) if totals else None,
            insights=ForecastInsights.from_payload(insights) if insights else None,
            yearly_breakdown=tuple(yearly),
        )


@dataclass(frozen=True)
class ForecastConfidence:
    score: int = 0
    level: str = ""
    description: str = ""
    top_improvements: Tuple[Tuple[str, int], ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ForecastConfidence":
        raw = payload.get("topImprovements")
        improvements: List[Tuple[str, int]] = []
        if isinstance(raw, list):
            improvements = [
                (_text(item, "suggestion"), _int(item, "potentialGain"))
                for item in raw
                if isinstance(item, Mapping)
            ]
        return cls(
            score=_int(payload, "score"),
            level=_text(payload, "level").lower(),
            description=_text(payload, "description"),
            top_improvements=tuple(improvements),
        )


@dataclass(frozen=True)
class Bundle:
    key: str
    name: str = ""
    achieved_at: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Bundle":
        return cls(
            key=_text(payload, "key"),
            name=_text(payload, "name"),
            achieved_at=_opt_int(payload, "achievedAt"),
        )

    @property
    def achieved(self) -> bool:
        return self.achieved_at is not None

    @property
    def short_name(self) -> str:
        return self.name.replace(" Health Bundle", "")


@dataclass(frozen=True)
class NextBundle:
    name: str = ""
    remaining_points: int = 0
    progress_percent: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NextBundle":
        return cls(
            name=_text(payload, "name"),
            remaining_points=_int(payload, "remainingPoints"),
            progress_percent=min(100.0, max(0.0, _number(payload, "progressPercent"))),
        )


@dataclass(frozen=True)
class BundleProgress:
    """Health-points balance and progress toward the next reward bundle."""

    current_points: int = 0
    lifetime_points: int = 0
    next_bundle: Optional[NextBundle] = None
    bundles: Tuple[Bundle, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BundleProgress":
        nxt = _mapping(payload.get("nextBundle"))
        raw = payload.get("bundles")
        bundles = []
        if isinstance(raw, list):
            bundles = [Bundle.from_payload(b) for b in raw if isinstance(b, Mapping)]
        return cls(
            current_points=_int(payload, "currentPoints"),
            lifetime_points=_int(payload, "lifetimePoints"),
            next_bundle=NextBundle.from_payload(nxt) if nxt else None,
            bundles=tuple(bundles),
        )


__all__ = [
    "BudgetForecast",
    "Bundle",
    "BundleProgress",
    "ForecastConfidence",
    "ForecastInsights",
    "ForecastSummary",
    "ForecastTotals",
    "Home",
    "HomeId",
    "HomeSystem",
    "Issue",
    "MaintenanceTask",
    "NextBundle",
    "Packet",
    "PacketId",
    "Subscription",
    "SystemId",
    "SystemType",
    "SystemTypeId",
    "TaskId",
    "TaskStats",
    "TaskTemplate",
    "UserProfile",
]
