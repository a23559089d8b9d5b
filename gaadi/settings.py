"""User-facing application settings and theme."""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict

from . import keys
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

SORT_ORDERS = ("newest", "oldest")
REMINDER_LEAD_TIMES = (7, 14, 30)
THEMES = ("default", "forest", "sunset", "dark")
DEFAULT_THEME = "default"

_STORED_NAMES = {
    "notifications_enabled": "notificationsEnabled",
    "clear_data_on_logout": "clearDataOnLogout",
    "default_sort_order": "defaultSortOrder",
    "reminder_lead_time": "reminderLeadTime",
}


@dataclass
class AppSettings:
    notifications_enabled: bool = True
    clear_data_on_logout: bool = False
    default_sort_order: str = "newest"
    reminder_lead_time: int = 14

    def to_dict(self) -> Dict[str, Any]:
        return {stored: getattr(self, name) for name, stored in _STORED_NAMES.items()}

    def replace(self, **changes) -> "AppSettings":
        """Return a copy with changes applied, rejecting out-of-range values."""
        updated = dataclasses.replace(self, **changes)
        if updated.default_sort_order not in SORT_ORDERS:
            raise ValueError(f"default_sort_order must be one of {SORT_ORDERS}")
        if updated.reminder_lead_time not in REMINDER_LEAD_TIMES:
            raise ValueError(f"reminder_lead_time must be one of {REMINDER_LEAD_TIMES}")
        return updated


def load_settings(adapter: PersistenceAdapter) -> AppSettings:
    """
    Load settings, merging stored values over the defaults.

    Unknown keys are dropped and invalid values fall back to their default.
    """
    raw = adapter.load(keys.SETTINGS, {})
    settings = AppSettings()
    if not isinstance(raw, dict):
        logger.warning("Ignoring malformed settings payload: %r", raw)
        return settings

    if isinstance(raw.get("notificationsEnabled"), bool):
        settings.notifications_enabled = raw["notificationsEnabled"]
    if isinstance(raw.get("clearDataOnLogout"), bool):
        settings.clear_data_on_logout = raw["clearDataOnLogout"]
    if raw.get("defaultSortOrder") in SORT_ORDERS:
        settings.default_sort_order = raw["defaultSortOrder"]
    try:
        lead_time = int(raw.get("reminderLeadTime", settings.reminder_lead_time))
    except (TypeError, ValueError):
        lead_time = settings.reminder_lead_time
    if lead_time in REMINDER_LEAD_TIMES:
        settings.reminder_lead_time = lead_time
    return settings


def save_settings(adapter: PersistenceAdapter, settings: AppSettings) -> None:
    adapter.save(keys.SETTINGS, settings.to_dict())


def load_theme(adapter: PersistenceAdapter) -> str:
    theme = adapter.load(keys.THEME, DEFAULT_THEME)
    return theme if theme in THEMES else DEFAULT_THEME


def save_theme(adapter: PersistenceAdapter, theme: str) -> None:
    if theme not in THEMES:
        raise ValueError(f"theme must be one of {THEMES}")
    adapter.save(keys.THEME, theme)
