import pytest

from services.catalog_service import (
    delete_product,
    load_categories,
    normalize_serial,
    product_payload,
    save_category,
    save_product,
    validate_product_form,
)


def product_form(**overrides):
    data = {
        "name": "Floor Cleaner",
        "category_id": "c1",
        "price": "120",
        "sale_price": "0",
        "stock": "30",
        "sku": "FC-500",
        "serial_no": 0,
    }
    data.update(overrides)
    return data


@pytest.mark.parametrize("value,expected", [(0, None), ("", None), (None, None), ("4", 4), (2, 2)])
def test_normalize_serial(value, expected):
    assert normalize_serial(value) == expected


def test_product_payload():
    payload = product_payload(product_form())
    assert payload["price"] == 120.0
    assert payload["sale_price"] is None
    assert payload["stock"] == 30
    assert payload["serial_no"] is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": " "},
        {"category_id": None},
        {"price": "-1"},
        {"price": "abc"},
        {"sku": "bad sku!"},
    ],
)
def test_invalid_product_forms(overrides):
    ok, _ = validate_product_form(product_form(**overrides))
    assert not ok


def test_save_product_create_and_update(store):
    ok, msg, _ = save_product(product_form())
    assert ok and msg == "Product created successfully"
    ok, msg, _ = save_product(product_form(), product_id="p1")
    assert ok and msg == "Product updated successfully"
    assert store.names() == ["insert_row", "update_row"]


def test_save_category_requires_name(store):
    ok, msg, _ = save_category({"name": ""})
    assert not ok
    assert msg == "Category name cannot be empty"
    assert store.calls == []


def test_load_categories_sorted_by_serial(store):
    store.result = (True, "Fetched", [
        {"id": "a", "name": "A", "serial_no": 3},
        {"id": "b", "name": "B", "serial_no": None},
        {"id": "c", "name": "C", "serial_no": 1},
    ])
    ok, _, categories = load_categories()
    assert ok
    assert [c.serial_no for c in categories] == [1, 3, None]


def test_delete_failure_message(store):
    store.result = (False, "fk violation")
    ok, msg = delete_product("p1")
    assert not ok
    assert msg == "Failed to delete product. Please try again."
