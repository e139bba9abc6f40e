from domain.models import NotificationSettings, SecuritySettings, StoreSettings
from services.settings_service import SettingsService, merge_with_defaults


def test_defaults_when_nothing_stored(store):
    ok, _, settings = SettingsService().load_store()
    assert ok
    assert settings == StoreSettings()
    assert settings.store_name == "Smart Cleaners"
    assert settings.free_shipping_threshold == 500


def test_stored_values_override_defaults(store):
    store.result = (True, "Fetched", {"id": "store", "data": {"store_name": "Shine Co", "tax_rate": "12"}})
    ok, _, settings = SettingsService().load_store()
    assert ok
    assert settings.store_name == "Shine Co"
    assert settings.tax_rate == 12.0
    assert settings.currency == "INR"


def test_merge_drops_unknown_and_invalid_values():
    merged = merge_with_defaults(SecuritySettings, {"session_timeout": "abc", "login_attempts": "3", "extra": 1})
    assert merged.session_timeout == 30
    assert merged.login_attempts == 3


def test_load_failure_returns_defaults(store):
    store.result = (False, "down", None)
    ok, msg, settings = SettingsService().load_notifications()
    assert not ok
    assert msg == "Failed to load settings"
    assert settings == NotificationSettings()


def test_save_upserts_with_audit_fields(store):
    ok, msg = SettingsService(updated_by="admin@example.com").save_notifications(
        NotificationSettings(daily_reports=True)
    )
    assert ok
    assert msg == "Notifications settings have been updated successfully"
    name, args, _ = store.calls[0]
    assert name == "upsert_row"
    table, row = args
    assert table == "settings"
    assert row["id"] == "notifications"
    assert row["data"]["daily_reports"] is True
    assert row["updated_by"] == "admin@example.com"
    assert row["updated_at"]


def test_save_store_validation(store):
    ok, msg = SettingsService().save_store(StoreSettings(store_name="  "))
    assert not ok
    assert msg == "Store name cannot be empty"
    ok, _ = SettingsService().save_store(StoreSettings(shipping_cost=-1))
    assert not ok
    assert store.calls == []


def test_save_security_validation(store):
    assert not SettingsService().save_security(SecuritySettings(session_timeout=0))[0]
    assert not SettingsService().save_security(SecuritySettings(password_expiry=-1))[0]
    assert SettingsService().save_security(SecuritySettings())[0]
    assert store.names() == ["upsert_row"]
