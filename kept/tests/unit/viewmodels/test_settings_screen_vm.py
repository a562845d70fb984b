from __future__ import annotations

from datetime import datetime

from kept.domain.entities import Home, Subscription, UserProfile
from kept.domain.query import QueryResult
from kept.viewmodels.settings_screen_vm import (
    TIERS,
    SettingsScreenVM,
    SubscriptionVM,
    checkout_url,
    renewal_label,
)

PERIOD_END = int(datetime(2026, 4, 15, 12, 0).timestamp() * 1000)


def test_profile_card_for_free_user() -> None:
    vm = SettingsScreenVM()
    assert vm.profile_card() is None

    vm.set_profile(QueryResult.resolved(UserProfile(id="u", name="", email="sam@example.com")))
    card = vm.profile_card()

    assert card["avatar"] == "S"
    assert card["name"] == "User"
    assert (card["tier_label"], card["tier_variant"]) == ("Free", "default")
    assert card["show_upgrade"] is True
    assert card["upgrade_label"] == "Upgrade to Pro - $7.99/mo"


def test_profile_card_for_paid_user() -> None:
    vm = SettingsScreenVM()
    vm.set_profile(QueryResult.resolved(UserProfile(id="u", name="Robin", tier="pro_plus")))

    card = vm.profile_card()

    assert (card["tier_label"], card["tier_variant"]) == ("Pro+", "success")
    assert card["show_upgrade"] is False


def test_home_card_counts_other_homes() -> None:
    vm = SettingsScreenVM()
    assert vm.home_card() is None

    active = Home(id="h1", name="Maple")
    vm.set_homes([active, Home(id="h2"), Home(id="h3")], active)
    assert vm.home_card()["others"] == "2 other homes"
    assert vm.home_card()["address"] == "No address set"

    vm.set_homes([active, Home(id="h2")], active)
    assert vm.home_card()["others"] == "1 other home"
    vm.set_homes([active], active)
    assert vm.home_card()["others"] == ""


def test_renewal_label_variants() -> None:
    active = Subscription(tier="homeowner_pro", status="active", current_period_end=PERIOD_END)

    assert renewal_label(None) == ""
    assert renewal_label(Subscription(status="canceled")) == ""
    assert renewal_label(active) == "Renews on 4/15/2026"
    assert renewal_label(active, short=True) == "Renews 4/15/2026"
    cancelling = Subscription(status="active", current_period_end=PERIOD_END, cancel_at_period_end=True)
    assert renewal_label(cancelling) == "Cancels on 4/15/2026"
    assert renewal_label(Subscription(status="active")) == "Renews on -"


def test_subscription_cards_for_pro_user() -> None:
    vm = SubscriptionVM()
    assert vm.is_loading

    vm.set_profile(QueryResult.resolved(UserProfile(id="u", tier="homeowner_pro")))
    vm.set_subscription(
        QueryResult.resolved(
            Subscription(tier="homeowner_pro", status="active", current_period_end=PERIOD_END)
        )
    )
    cards = {c.tier.id: c for c in vm.cards()}

    assert vm.current_plan_name() == "Pro"
    assert vm.renewal_line() == "Renews 4/15/2026"
    assert cards["free"].can_upgrade is False
    assert cards["homeowner_pro"].is_current is True
    assert cards["homeowner_pro"].can_manage is True
    assert cards["pro_plus"].can_upgrade is True
    assert cards["pro_plus"].price_label == "$14.99/month"
    assert cards["free"].price_label == "Free"


def test_subscription_cards_for_free_user() -> None:
    vm = SubscriptionVM()
    vm.set_profile(QueryResult.resolved(UserProfile(id="u")))

    cards = vm.cards()

    assert [c.can_upgrade for c in cards] == [False, True, True]
    assert not any(c.can_manage for c in cards)
    assert [t.recommended for t in TIERS] == [False, True, False]


def test_checkout_url_encodes_tier() -> None:
    assert checkout_url("pro_plus") == "https://kept.app/checkout?tier=pro_plus"
    assert SubscriptionVM.upgrade_url("homeowner_pro").endswith("tier=homeowner_pro")
