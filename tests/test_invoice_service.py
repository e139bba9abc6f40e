import io
from datetime import datetime, timezone

from docx import Document

from conftest import make_order
from domain.models import Order, StoreSettings
from services.invoice_service import (
    build_invoice,
    fill_placeholders,
    invoice_file_name,
    render_invoice_docx,
    render_invoice_html,
)


def priced_order():
    return make_order(
        row_id="inv001",
        final_total=482.0,
        subtotal=480.0,
        items=[
            {
                "product_id": "p1",
                "quantity": 12,
                "unit_price": 40,
                "bulk_discount_per_unit": 4,
                "final_unit_price": 36,
                "line_total": 432,
                "product_details": {"name": "Dish <Soap>", "sku": "DS-1"},
            }
        ],
        pricing={"subtotal": 480, "bulk_discount_total": 48, "shipping_cost": 50, "final_total": 482},
        tracking_number="AWB77",
    )


def test_build_invoice():
    invoice = build_invoice(priced_order(), StoreSettings(), issued_on=datetime(2026, 10, 18, tzinfo=timezone.utc))
    assert invoice.order_id == "ORD-inv001"
    assert invoice.issued_on == "18 Oct 2026"
    assert invoice.store_name == "Smart Cleaners"
    assert invoice.lines[0].unit_price == 36
    assert invoice.lines[0].line_total_display == "₹432.00"
    assert invoice.final_total == 482
    assert invoice.bulk_discount_total == 48
    assert invoice.payment_method == "Cash on delivery"


def test_legacy_order_invoice_falls_back_to_total_amount():
    order = Order.from_row({
        "id": "legacy1",
        "status": "delivered",
        "total_amount": 150,
        "items": [{"product_id": "p", "quantity": 1, "price": 100}],
    })
    invoice = build_invoice(order, StoreSettings())
    assert invoice.subtotal == 100
    assert invoice.final_total == 150
    assert invoice.shipping_cost == 50
    assert invoice.issued_on == "N/A"


def test_html_invoice():
    invoice = build_invoice(priced_order(), StoreSettings())
    page = render_invoice_html(invoice)
    assert page.startswith("<!DOCTYPE html>")
    assert "Invoice ORD-inv001" in page
    assert "<svg" in page
    assert "window.print()" in page
    assert "Dish &lt;Soap&gt;" in page
    assert "Tracking: AWB77" in page
    assert "₹482.00" in page
    assert "{{" not in page


def test_fill_placeholders_single_pass():
    out = fill_placeholders("{{a}} {{b}} {{c}}", {"{{a}}": "{{b}}", "{{b}}": "B"})
    assert out == "{{b}} B {{c}}"


def test_docx_invoice():
    invoice = build_invoice(priced_order(), StoreSettings())
    doc = Document(io.BytesIO(render_invoice_docx(invoice)))
    text = "\n".join(p.text for p in doc.paragraphs)
    assert "Invoice ORD-inv001" in text
    assert "Total: ₹482.00" in text
    table = doc.tables[0]
    assert table.rows[1].cells[1].text == "Dish <Soap>"
    assert table.rows[1].cells[3].text == "12"


def test_invoice_file_name():
    invoice = build_invoice(make_order(row_id="x/1"), StoreSettings())
    assert invoice_file_name(invoice, "html") == "invoice-ORD-x_1.html"
