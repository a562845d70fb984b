"""Load, save and clear the onboarding draft in the private key-value store.

The draft lives under three keys. Missing, corrupt or wrongly shaped values
load as empty defaults: an unreadable draft just means "start of flow".
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from kept.domain.onboarding import OnboardingSession
from kept.domain.ports import KeyValueStorePort

log = logging.getLogger(__name__)

KEY_HOME_ID = "onboarding_home_id"
KEY_SYSTEM_TYPE_IDS = "onboarding_system_type_ids"
KEY_INSTALL_YEARS = "onboarding_system_install_years"

ONBOARDING_KEYS = (KEY_HOME_ID, KEY_SYSTEM_TYPE_IDS, KEY_INSTALL_YEARS)


def _load_json(store: KeyValueStorePort, key: str) -> Any:
    raw = store.get(key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        log.debug("Ignoring unreadable onboarding value for %s", key)
        return None


def _type_ids(data: Any) -> List[str]:
    if not isinstance(data, list):
        return []
    return [str(item) for item in data if isinstance(item, (str, int)) and str(item).strip()]


def _install_years(data: Any) -> Dict[str, Optional[str]]:
    if not isinstance(data, dict):
        return {}
    years: Dict[str, Optional[str]] = {}
    for key, value in data.items():
        if value is None or isinstance(value, str):
            years[str(key)] = value
        elif isinstance(value, int) and not isinstance(value, bool):
            years[str(key)] = str(value)
    return years


def load_onboarding_session(store: KeyValueStorePort) -> OnboardingSession:
    home_id = store.get(KEY_HOME_ID) or None
    return OnboardingSession(
        home_id=home_id,
        system_type_ids=tuple(_type_ids(_load_json(store, KEY_SYSTEM_TYPE_IDS))),
        install_years=_install_years(_load_json(store, KEY_INSTALL_YEARS)),
    )


def save_onboarding_home_id(store: KeyValueStorePort, session: OnboardingSession) -> None:
    if session.home_id:
        store.set(KEY_HOME_ID, session.home_id)
    else:
        store.delete(KEY_HOME_ID)


def save_onboarding_selection(store: KeyValueStorePort, session: OnboardingSession) -> None:
    store.set(KEY_SYSTEM_TYPE_IDS, json.dumps(list(session.system_type_ids)))


def save_onboarding_years(store: KeyValueStorePort, session: OnboardingSession) -> None:
    store.set(KEY_INSTALL_YEARS, json.dumps(dict(session.install_years)))


def save_onboarding_session(store: KeyValueStorePort, session: OnboardingSession) -> None:
    """Persist all three parts of the draft."""
    save_onboarding_home_id(store, session)
    save_onboarding_selection(store, session)
    save_onboarding_years(store, session)


def clear_onboarding_session(store: KeyValueStorePort) -> None:
    for key in ONBOARDING_KEYS:
        store.delete(key)


__all__ = [
    "KEY_HOME_ID",
    "KEY_INSTALL_YEARS",
    "KEY_SYSTEM_TYPE_IDS",
    "ONBOARDING_KEYS",
    "clear_onboarding_session",
    "load_onboarding_session",
    "save_onboarding_home_id",
    "save_onboarding_selection",
    "save_onboarding_session",
    "save_onboarding_years",
]
