"""Settings tab and subscription screen projections.

Call context:
    ``/settings`` feeds the current profile, the subscription and the active
    home result into ``SettingsScreenVM``. ``/settings/subscription`` uses
    ``SubscriptionVM``; upgrades and billing only build URLs that the view
    opens, checkout itself happens outside the app.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import urlencode

from kept.domain.entities import Home, Subscription, UserProfile
from kept.domain.query import QueryResult
from kept.domain.time_utils import parse_backend_datetime

from .status_format import tier_label, tier_variant

CHECKOUT_URL = "https://kept.app/checkout"
BILLING_URL = "https://kept.app/billing"
SUPPORT_EMAIL = "support@kept.app"
HELP_URL = "https://kept.app/help"
PRIVACY_URL = "https://kept.app/privacy"
TERMS_URL = "https://kept.app/terms"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Tier:
    id: str
    name: str
    price: float
    period: str
    features: Tuple[str, ...]
    limitations: Tuple[str, ...] = ()
    recommended: bool = False


TIERS = (
    Tier(
        "free",
        "Free",
        0,
        "",
        ("1 home", "5 systems", "Basic health scores", "Task reminders"),
        ("No DIY guides", "No cost forecasts", "No packet sharing"),
    ),
    Tier(
        "homeowner_pro",
        "Pro",
        7.99,
        "month",
        (
            "3 homes",
            "Unlimited systems",
            "Full DIY guides",
            "Cost forecasts",
            "Packet sharing",
            "5 scans/month",
        ),
        recommended=True,
    ),
    Tier(
        "pro_plus",
        "Pro+",
        14.99,
        "month",
        (
            "5 homes",
            "Everything in Pro",
            "Unlimited scans",
            "Seasonal checklists",
            "Exportable reports",
            "Service directory",
        ),
    ),
)


def checkout_url(tier_id: str) -> str:
    return f"{CHECKOUT_URL}?{urlencode({'tier': tier_id})}"


def renewal_label(subscription: Optional[Subscription], *, short: bool = False) -> str:
    """"Renews on 3/5/2026" style line for an active subscription, else ``""``."""
    if subscription is None or subscription.status != "active":
        return ""
    verb = "Cancels" if subscription.cancel_at_period_end else "Renews"
    if not short:
        verb += " on"
    end = parse_backend_datetime(subscription.current_period_end)
    if end is None:
        return f"{verb} -"
    local = end.astimezone()
    return f"{verb} {local.month}/{local.day}/{local.year}"


class SettingsScreenVM:
    def __init__(self) -> None:
        self.profile: QueryResult[Optional[UserProfile]] = QueryResult.pending()
        self.subscription: QueryResult[Optional[Subscription]] = QueryResult.pending()
        self.homes: List[Home] = []
        self.active_home: Optional[Home] = None

    def set_profile(self, result: QueryResult[Optional[UserProfile]]) -> None:
        self.profile = result

    def set_subscription(self, result: QueryResult[Optional[Subscription]]) -> None:
        self.subscription = result

    def set_homes(self, homes: List[Home], active_home: Optional[Home]) -> None:
        self.homes = list(homes)
        self.active_home = active_home

    def profile_card(self) -> Optional[dict]:
        profile = self.profile.value if self.profile.is_resolved else None
        if profile is None:
            return None
        tier = profile.tier or "free"
        return {
            "avatar": profile.initials,
            "name": profile.name or "User",
            "email": profile.email,
            "tier_label": tier_label(tier),
            "tier_variant": tier_variant(tier),
            "show_upgrade": tier == "free",
            "upgrade_label": "Upgrade to Pro - $7.99/mo",
        }

    def home_card(self) -> Optional[dict]:
        home = self.active_home
        if home is None:
            return None
        others = len(self.homes) - 1
        return {
            "name": home.display_name,
            "address": home.address_line1 or "No address set",
            "others": f"{others} other home{'s' if others > 1 else ''}" if others > 0 else "",
        }

    def subscription_line(self) -> str:
        sub = self.subscription.value if self.subscription.is_resolved else None
        return renewal_label(sub)


@dataclass
class TierCard:
    tier: Tier
    is_current: bool
    can_upgrade: bool
    can_manage: bool
    price_label: str


class SubscriptionVM:
    def __init__(self) -> None:
        self.profile: QueryResult[Optional[UserProfile]] = QueryResult.pending()
        self.subscription: QueryResult[Optional[Subscription]] = QueryResult.pending()

    def set_profile(self, result: QueryResult[Optional[UserProfile]]) -> None:
        self.profile = result

    def set_subscription(self, result: QueryResult[Optional[Subscription]]) -> None:
        self.subscription = result

    @property
    def is_loading(self) -> bool:
        return not self.profile.is_resolved or self.profile.value is None

    @property
    def current_tier(self) -> str:
        profile = self.profile.value if self.profile.is_resolved else None
        return (profile.tier if profile else "") or "free"

    def current_plan_name(self) -> str:
        for tier in TIERS:
            if tier.id == self.current_tier:
                return tier.name
        return "Free"

    def renewal_line(self) -> str:
        sub = self.subscription.value if self.subscription.is_resolved else None
        return renewal_label(sub, short=True)

    def cards(self) -> List[TierCard]:
        current = self.current_tier
        ids = [t.id for t in TIERS]
        current_index = ids.index(current) if current in ids else -1
        subscribed = current != "free"
        cards = []
        for index, tier in enumerate(TIERS):
            is_current = tier.id == current
            cards.append(
                TierCard(
                    tier=tier,
                    is_current=is_current,
                    can_upgrade=not is_current and index > current_index,
                    can_manage=is_current and subscribed,
                    price_label=f"${tier.price:g}/{tier.period}" if tier.price > 0 else "Free",
                )
            )
        return cards

    @staticmethod
    def upgrade_url(tier_id: str) -> str:
        return checkout_url(tier_id)

    @staticmethod
    def billing_url() -> str:
        return BILLING_URL


__all__ = [
    "APP_VERSION",
    "BILLING_URL",
    "SettingsScreenVM",
    "SubscriptionVM",
    "TIERS",
    "Tier",
    "TierCard",
    "checkout_url",
    "renewal_label",
]
