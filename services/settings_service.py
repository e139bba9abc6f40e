# services/settings_service.py

import dataclasses
import logging
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import data_integrator
from domain.models import NotificationSettings, SecuritySettings, StoreSettings
from utils.coercion import to_bool, to_float, to_int

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "settings"

STORE = "store"
NOTIFICATIONS = "notifications"
SECURITY = "security"

SettingsT = TypeVar("SettingsT", StoreSettings, NotificationSettings, SecuritySettings)

_COERCERS = {
    bool: to_bool,
    int: to_int,
    float: to_float,
    str: lambda v: "" if v is None else str(v),
}


def merge_with_defaults(cls: Type[SettingsT], stored: Optional[Dict[str, Any]]) -> SettingsT:
    """
    Overlay stored values on the dataclass defaults. Unknown keys are
    dropped; values that don't coerce keep the default.
    """
    settings = cls()
    if not stored:
        return settings

    changes = {}
    for f in dataclasses.fields(cls):
        if f.name not in stored:
            continue
        coerce = _COERCERS.get(type(getattr(settings, f.name)), lambda v: v)
        try:
            changes[f.name] = coerce(stored[f.name])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid %s.%s value: %r", cls.__name__, f.name, stored[f.name])
    return dataclasses.replace(settings, **changes)


class SettingsService:
    """
    Read/write access to the `settings` table, one row per settings group.

    Each row is `{"id": <group>, "data": {...}, "updated_at", "updated_by"}`.
    """

    def __init__(self, updated_by: Optional[str] = None):
        self.updated_by = updated_by

    def _load(self, key: str, cls: Type[SettingsT]) -> Tuple[bool, str, SettingsT]:
        ok, msg, row = data_integrator.get_row(SETTINGS_TABLE, key)
        if not ok:
            logger.error("Loading %s settings failed: %s", key, msg)
            return False, "Failed to load settings", cls()
        return True, msg, merge_with_defaults(cls, (row or {}).get("data"))

    def _save(self, key: str, settings) -> Tuple[bool, str]:
        row = {
            "id": key,
            "data": dataclasses.asdict(settings),
            "updated_at": data_integrator.utc_now_iso(),
            "updated_by": self.updated_by,
        }
        ok, msg, _ = data_integrator.upsert_row(SETTINGS_TABLE, row)
        if not ok:
            logger.error("Saving %s settings failed: %s", key, msg)
            return False, f"Failed to save {key} settings"
        return True, f"{key.capitalize()} settings have been updated successfully"

    def load_store(self) -> Tuple[bool, str, StoreSettings]:
        return self._load(STORE, StoreSettings)

    def save_store(self, settings: StoreSettings) -> Tuple[bool, str]:
        if not settings.store_name.strip():
            return False, "Store name cannot be empty"
        if settings.tax_rate < 0 or settings.shipping_cost < 0 or settings.free_shipping_threshold < 0:
            return False, "Tax rate and shipping amounts cannot be negative"
        return self._save(STORE, settings)

    def load_notifications(self) -> Tuple[bool, str, NotificationSettings]:
        return self._load(NOTIFICATIONS, NotificationSettings)

    def save_notifications(self, settings: NotificationSettings) -> Tuple[bool, str]:
        return self._save(NOTIFICATIONS, settings)

    def load_security(self) -> Tuple[bool, str, SecuritySettings]:
        return self._load(SECURITY, SecuritySettings)

    def save_security(self, settings: SecuritySettings) -> Tuple[bool, str]:
        if settings.session_timeout < 1 or settings.login_attempts < 1:
            return False, "Session timeout and login attempts must be at least 1"
        if settings.password_expiry < 0:
            return False, "Password expiry cannot be negative"
        return self._save(SECURITY, settings)
