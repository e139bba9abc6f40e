# services/invoice_service.py

import html
import io
import re
from datetime import datetime
from typing import Dict, Optional

from docx import Document
from docx.shared import Inches, Pt

from domain.models import Invoice, InvoiceLine, Order, StoreSettings
from utils.barcode import barcode_png, barcode_svg
from utils.formatting import format_date, format_inr, humanize

PLACEHOLDER = re.compile(r"\{\{\w+\}\}")

INVOICE_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Invoice {{order_id}}</title>
<style>
  body { font-family: Arial, sans-serif; margin: 32px; color: #222; }
  h1 { margin: 0 0 4px 0; }
  table { width: 100%; border-collapse: collapse; margin-top: 16px; }
  th, td { border-bottom: 1px solid #ddd; padding: 6px; text-align: left; }
  td.num, th.num { text-align: right; }
  .totals td { border: none; }
  .grand td { font-weight: bold; border-top: 2px solid #222; }
  .barcode svg { height: 60px; }
  @media print { .no-print { display: none; } }
</style>
</head>
<body>
<div class="no-print"><button onclick="window.print()">Print</button></div>
<h1>{{store_name}}</h1>
<div>{{store_address}} &middot; {{store_phone}}</div>
<h2>Invoice {{order_id}}</h2>
<div class="barcode">{{barcode}}</div>
<p>Date: {{issued_on}}<br>Status: {{status}}<br>Payment: {{payment_method}}{{tracking}}</p>
<h3>Bill to</h3>
<p>{{customer_name}}<br>{{customer_phone}}<br>{{customer_address}}</p>
<table>
<thead><tr><th>#</th><th>Item</th><th>SKU</th><th class="num">Qty</th><th class="num">Unit price</th><th class="num">Total</th></tr></thead>
<tbody>
{{rows}}
</tbody>
</table>
<table class="totals">
<tr><td>Subtotal</td><td class="num">{{subtotal}}</td></tr>
<tr><td>Bulk discount</td><td class="num">-{{bulk_discount_total}}</td></tr>
<tr><td>Shipping</td><td class="num">{{shipping_cost}}</td></tr>
<tr class="grand"><td>Total</td><td class="num">{{final_total}}</td></tr>
</table>
</body>
</html>
"""


def build_invoice(order: Order, store: StoreSettings, issued_on: Optional[datetime] = None) -> Invoice:
    """
    Build an Invoice from an order. Orders without a stored pricing
    summary fall back to their line totals (and legacy total_amount).
    """
    lines = []
    for idx, item in enumerate(order.items, start=1):
        lines.append(
            InvoiceLine(
                index=idx,
                name=item.product_name or item.product_id,
                sku=item.sku,
                qty=item.quantity,
                unit_price=item.final_unit_price,
                discount_per_unit=item.bulk_discount_per_unit,
                line_total=item.line_total,
                unit_price_display=format_inr(item.final_unit_price, 2),
                line_total_display=format_inr(item.line_total, 2),
            )
        )

    if order.pricing is not None:
        subtotal = order.pricing.subtotal
        discount = order.pricing.bulk_discount_total
        shipping = order.pricing.shipping_cost
        final_total = order.pricing.final_total
    else:
        subtotal = sum(line.line_total for line in lines)
        discount = 0.0
        final_total = order.total_amount if order.total_amount is not None else subtotal
        shipping = max(final_total - subtotal, 0.0)

    return Invoice(
        order_id=order.order_id,
        issued_on=format_date(issued_on or order.created_at),
        store_name=store.store_name,
        store_address=store.store_address,
        store_phone=store.store_phone,
        customer_name=order.customer.name,
        customer_phone=order.customer.phone,
        customer_address=order.customer.address.display(),
        payment_method=humanize(order.payment_method),
        status=humanize(order.status.value),
        tracking_number=order.tracking_number or "",
        lines=lines,
        subtotal=subtotal,
        bulk_discount_total=discount,
        shipping_cost=shipping,
        final_total=final_total,
    )


def fill_placeholders(template: str, mapping: Dict[str, str]) -> str:
    """
    Replace every {{key}} in one pass, so substituted values are never
    scanned for further placeholders. Unknown keys are left as they are.
    """
    return PLACEHOLDER.sub(lambda m: mapping.get(m.group(0), m.group(0)), template)


def _row_html(line: InvoiceLine) -> str:
    cells = [
        str(line.index),
        html.escape(line.name),
        html.escape(line.sku or "-"),
        str(line.qty),
        line.unit_price_display,
        line.line_total_display,
    ]
    classes = ["", "", "", "num", "num", "num"]
    tds = "".join(
        f'<td class="{cls}">{val}</td>' if cls else f"<td>{val}</td>"
        for cls, val in zip(classes, cells)
    )
    return f"<tr>{tds}</tr>"


def render_invoice_html(invoice: Invoice) -> str:
    esc = html.escape
    tracking = f"<br>Tracking: {esc(invoice.tracking_number)}" if invoice.tracking_number else ""
    # values are escaped before substitution; barcode and rows are markup
    mapping = {
        "{{order_id}}": esc(invoice.order_id),
        "{{store_name}}": esc(invoice.store_name),
        "{{store_address}}": esc(invoice.store_address),
        "{{store_phone}}": esc(invoice.store_phone),
        "{{issued_on}}": esc(invoice.issued_on),
        "{{status}}": esc(invoice.status),
        "{{payment_method}}": esc(invoice.payment_method),
        "{{tracking}}": tracking,
        "{{customer_name}}": esc(invoice.customer_name),
        "{{customer_phone}}": esc(invoice.customer_phone),
        "{{customer_address}}": esc(invoice.customer_address),
        "{{subtotal}}": format_inr(invoice.subtotal, 2),
        "{{bulk_discount_total}}": format_inr(invoice.bulk_discount_total, 2),
        "{{shipping_cost}}": format_inr(invoice.shipping_cost, 2),
        "{{final_total}}": format_inr(invoice.final_total, 2),
        "{{rows}}": "\n".join(_row_html(line) for line in invoice.lines),
        "{{barcode}}": barcode_svg(invoice.order_id),
    }
    return fill_placeholders(INVOICE_HTML_TEMPLATE, mapping)


def render_invoice_docx(invoice: Invoice) -> bytes:
    """
    Same content as the HTML invoice, as a Word document.
    """
    doc = Document()
    doc.add_heading(invoice.store_name, level=1)
    doc.add_paragraph(f"{invoice.store_address} · {invoice.store_phone}")
    doc.add_heading(f"Invoice {invoice.order_id}", level=2)

    doc.add_picture(io.BytesIO(barcode_png(invoice.order_id)), width=Inches(2.5))

    meta = doc.add_paragraph()
    meta.add_run(f"Date: {invoice.issued_on}\n")
    meta.add_run(f"Status: {invoice.status}\n")
    meta.add_run(f"Payment: {invoice.payment_method}")
    if invoice.tracking_number:
        meta.add_run(f"\nTracking: {invoice.tracking_number}")

    doc.add_heading("Bill to", level=3)
    doc.add_paragraph(f"{invoice.customer_name}\n{invoice.customer_phone}\n{invoice.customer_address}")

    table = doc.add_table(rows=1, cols=6)
    table.style = "Table Grid"
    for cell, title in zip(table.rows[0].cells, ["#", "Item", "SKU", "Qty", "Unit price", "Total"]):
        cell.text = title

    for line in invoice.lines:
        cells = table.add_row().cells
        cells[0].text = str(line.index)
        cells[1].text = line.name
        cells[2].text = line.sku or "-"
        cells[3].text = str(line.qty)
        cells[4].text = line.unit_price_display
        cells[5].text = line.line_total_display

    totals = [
        ("Subtotal", format_inr(invoice.subtotal, 2)),
        ("Bulk discount", "-" + format_inr(invoice.bulk_discount_total, 2)),
        ("Shipping", format_inr(invoice.shipping_cost, 2)),
        ("Total", format_inr(invoice.final_total, 2)),
    ]
    for label, value in totals:
        p = doc.add_paragraph()
        run = p.add_run(f"{label}: {value}")
        if label == "Total":
            run.bold = True
            run.font.size = Pt(12)

    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def invoice_file_name(invoice: Invoice, extension: str) -> str:
    safe_id = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in invoice.order_id)
    return f"invoice-{safe_id}.{extension}"
