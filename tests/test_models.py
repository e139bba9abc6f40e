import pytest

from domain.models import (
    Address,
    BulkPricing,
    Combo,
    Order,
    OrderItem,
    OrderStatus,
    WholesaleAccount,
)


def test_order_from_row_defaults():
    order = Order.from_row({"id": "abcdef123456"})
    assert order.order_id == "ORD-123456"
    assert order.status == OrderStatus.PENDING
    assert order.pricing is None
    assert order.items == []
    assert order.flags.priority == "normal"
    assert order.tracking_number is None


def test_order_status_parse():
    assert OrderStatus.parse(" Shipped ") == OrderStatus.SHIPPED
    with pytest.raises(ValueError):
        OrderStatus.parse("lost")
    with pytest.raises(ValueError):
        Order.from_row({"id": "x", "status": "lost"})


def test_order_item_derives_missing_totals():
    item = OrderItem.from_row({
        "product_id": "p",
        "quantity": 3,
        "unit_price": 50,
        "bulk_discount_per_unit": 5,
        "product_details": {"name": "Sponge", "sku": "SP"},
    })
    assert item.final_unit_price == 45
    assert item.line_total == 135
    assert item.product_name == "Sponge"
    assert item.sku == "SP"


def test_address_display():
    assert Address.from_row("12 MG Road, Pune").display() == "12 MG Road, Pune"
    addr = Address.from_row({"street": "12 MG Road", "city": "Pune", "pincode": "411001"})
    assert addr.display() == "12 MG Road, Pune - 411001"
    assert Address.from_row(None).display() == ""


def test_bulk_pricing_round_trip_shape():
    pricing = BulkPricing.from_row({
        "id": "b1",
        "name": "Hotels",
        "tiers": [{"min_quantity": "10", "discount_percentage": "5"}, {"min_quantity": 50, "max_quantity": 100,
                                                                      "discount_percentage": 10}],
    })
    assert pricing.tiers[0].max_quantity is None
    assert pricing.tiers[0].contains(10_000)
    assert not pricing.tiers[1].contains(101)
    assert pricing.to_row()["tiers"][1]["max_quantity"] == 100


def test_wholesale_account_defaults():
    account = WholesaleAccount.from_row({"id": "w", "company_name": "Acme", "credit_limit": "2500"})
    assert account.credit_limit == 2500.0
    assert account.payment_terms == "30 days"
    assert account.is_active


def test_combo_from_row():
    combo = Combo.from_row({
        "id": "c",
        "name": "Starter",
        "products": [{"product_id": "p", "product_name": "Mop", "price": 300}],
        "valid_until": "2026-12-31T23:59:59Z",
    })
    assert combo.products[0].quantity == 1
    assert combo.valid_until.year == 2026
    assert combo.to_row()["valid_from"] is None
