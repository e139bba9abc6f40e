from datetime import date, datetime, timezone

from domain.models import Combo, ComboProduct, Product
from services.combo_service import build_combo_payload, combo_product_from, is_combo_live, save_combo


def cp(pid, price, qty=1):
    return ComboProduct(product_id=pid, product_name=pid.title(), quantity=qty, price=price)


def form(**overrides):
    data = {
        "name": "Kitchen Kit",
        "description": "Everything for the sink",
        "products": [cp("soap", 100, 2), cp("sponge", 50)],
        "combo_price": 200,
        "original_price": 1,  # ignored
        "savings": 1,  # ignored
    }
    data.update(overrides)
    return data


def test_single_product_combo_rejected_without_write(store):
    ok, msg, row = save_combo(form(products=[cp("soap", 100)]))
    assert not ok
    assert msg == "A combo must have at least 2 products"
    assert row is None
    assert store.calls == []


def test_two_product_combo_created(store):
    ok, msg, _ = save_combo(form())
    assert ok
    assert msg == "New combo has been created successfully"
    name, args, _ = store.calls[0]
    assert name == "insert_row"
    payload = args[1]
    assert payload["original_price"] == 250
    assert payload["savings"] == 50
    assert len(payload["products"]) == 2


def test_update_uses_combo_id(store):
    ok, msg, _ = save_combo(form(), combo_id="c7")
    assert ok
    assert msg == "Combo has been updated successfully"
    assert store.calls[0][0] == "update_row"
    assert store.calls[0][1][1] == "c7"


def test_negative_savings_allowed():
    ok, _, payload = build_combo_payload(form(combo_price=400))
    assert ok
    assert payload["savings"] == -150


def test_validity_window():
    ok, _, payload = build_combo_payload(form(valid_from=date(2026, 10, 1), valid_until=date(2026, 10, 31)))
    assert ok
    assert payload["valid_from"].startswith("2026-10-01T00:00:00")
    assert payload["valid_until"].startswith("2026-10-31T23:59:59")

    ok, msg, _ = build_combo_payload(form(valid_from=date(2026, 10, 31), valid_until=date(2026, 10, 1)))
    assert not ok
    assert msg == "Valid until must be after valid from"


def test_blank_name_rejected():
    ok, msg, _ = build_combo_payload(form(name="  "))
    assert not ok
    assert msg == "Combo name cannot be empty"


def test_failed_write(store):
    store.result = (False, "denied", None)
    ok, msg, _ = save_combo(form())
    assert not ok
    assert msg == "Failed to save combo. Please try again."


def test_combo_product_snapshot_uses_list_price():
    item = combo_product_from(Product(id="p", name="Mop", price=300, sale_price=250), 2)
    assert item.price == 300
    assert item.quantity == 2


def test_is_combo_live():
    now = datetime(2026, 10, 18, tzinfo=timezone.utc)
    live = Combo(id="c", name="C", valid_from=datetime(2026, 10, 1, tzinfo=timezone.utc))
    assert is_combo_live(live, now)
    assert not is_combo_live(Combo(id="c", name="C", is_active=False), now)
    expired = Combo(id="c", name="C", valid_until=datetime(2026, 10, 17, tzinfo=timezone.utc))
    assert not is_combo_live(expired, now)
