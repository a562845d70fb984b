"""Badge, label and placeholder tables shared by the screen view models.

Call context:
    ``CareVM``, ``TaskDetailVM``, ``SystemsVM`` and the settings view models
    call these helpers to map backend tokens (status, priority, category,
    difficulty, subscription tier) into consistent user-facing labels and
    badge variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Badge = Tuple[str, str]

STATUS_BADGES = {
    "overdue": ("Overdue", "danger"),
    "due": ("Due Soon", "warning"),
    "upcoming": ("Upcoming", "primary"),
    "completed": ("Completed", "success"),
    "snoozed": ("Snoozed", "default"),
}

PRIORITY_BADGES = {
    "critical": ("Critical", "danger"),
    "high": ("High", "warning"),
    "medium": ("Medium", "info"),
    "low": ("Low", "default"),
    "routine": ("Routine", "default"),
}

CATEGORY_LABELS = {
    "hvac": "HVAC",
    "plumbing": "Plumbing",
    "electrical": "Electrical",
    "appliances": "Appliances",
    "structural": "Structural",
    "exterior": "Exterior",
}

# Care screen category pills; the empty value means "All".
CATEGORY_FILTERS: Tuple[Tuple[str, str], ...] = (("", "All"),) + tuple(CATEGORY_LABELS.items())

DIFFICULTY_LABELS = {
    "easy": "Easy",
    "moderate": "Moderate",
    "hard": "Hard",
    "pro_only": "Pro Only",
}

SORT_LABELS = {
    "date": "Date",
    "priority": "Priority",
    "cost": "Cost",
    "difficulty": "Difficulty",
}

TIER_LABELS = {
    "free": "Free",
    "homeowner_pro": "Pro",
    "pro_plus": "Pro+",
    "property_manager": "Property Manager",
}


def token_key(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def status_badge(status: Optional[str]) -> Badge:
    key = token_key(status)
    return STATUS_BADGES.get(key, (status or "", "default"))


def priority_badge(priority: Optional[str]) -> Badge:
    key = token_key(priority)
    return PRIORITY_BADGES.get(key, (priority or "", "default"))


def category_label(category: Optional[str]) -> str:
    return CATEGORY_LABELS.get(token_key(category), category or "")


def difficulty_label(difficulty: Optional[str]) -> str:
    """Label for a template difficulty; missing difficulty reads as Moderate."""
    key = token_key(difficulty) or "moderate"
    return DIFFICULTY_LABELS.get(key, "")


def tier_label(tier: Optional[str]) -> str:
    key = token_key(tier) or "free"
    return TIER_LABELS.get(key, tier or "Free")


def tier_variant(tier: Optional[str]) -> str:
    key = token_key(tier) or "free"
    if key == "free":
        return "default"
    if key == "homeowner_pro":
        return "primary"
    return "success"


@dataclass(frozen=True)
class EmptyState:
    title: str
    description: str
    action_label: str = ""


EMPTY_HOMES = EmptyState(
    "Add your first home",
    "Set up a property to unlock forecasts and maintenance tracking.",
    "Add Home",
)
EMPTY_TASKS = EmptyState(
    "All caught up!",
    "No upcoming maintenance tasks. Great job keeping your home in shape!",
)
EMPTY_SYSTEMS = EmptyState(
    "No systems yet",
    "Add systems to get maintenance predictions and cost forecasts.",
    "Add System",
)
EMPTY_PACKETS = EmptyState(
    "No packets yet",
    "Create a packet when something breaks or needs service.",
    "New Packet",
)
EMPTY_COMPLETED = EmptyState("No completed tasks yet", "")


__all__ = [
    "CATEGORY_FILTERS",
    "CATEGORY_LABELS",
    "DIFFICULTY_LABELS",
    "EMPTY_COMPLETED",
    "EMPTY_HOMES",
    "EMPTY_PACKETS",
    "EMPTY_SYSTEMS",
    "EMPTY_TASKS",
    "EmptyState",
    "PRIORITY_BADGES",
    "SORT_LABELS",
    "STATUS_BADGES",
    "TIER_LABELS",
    "category_label",
    "difficulty_label",
    "priority_badge",
    "status_badge",
    "tier_label",
    "tier_variant",
    "token_key",
]
