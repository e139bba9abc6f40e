# services/messaging_service.py

import re
from typing import Optional
from urllib.parse import quote

from domain.models import Order, OrderStatus
from utils.formatting import format_inr

WHATSAPP_BASE_URL = "https://wa.me"
DEFAULT_COUNTRY_CODE = "91"

STATUS_LINES = {
    OrderStatus.PENDING: "We have received your order.",
    OrderStatus.CONFIRMED: "Your order has been confirmed.",
    OrderStatus.PROCESSING: "Your order is being prepared.",
    OrderStatus.SHIPPED: "Your order is on its way.",
    OrderStatus.DELIVERED: "Your order has been delivered. Thank you for shopping with us!",
    OrderStatus.CANCELLED: "Your order has been cancelled.",
}


def normalize_phone(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> Optional[str]:
    """
    Digits-only international number, or None when there aren't enough
    digits to dial. Bare 10-digit numbers get `country_code`; a leading
    trunk 0 is dropped.
    """
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) == 11 and digits.startswith("0"):
        digits = digits[1:]
    if len(digits) == 10:
        digits = country_code + digits
    if len(digits) < 11 or len(digits) > 15:
        return None
    return digits


def whatsapp_link(phone: str, text: str) -> Optional[str]:
    number = normalize_phone(phone)
    if number is None:
        return None
    return f"{WHATSAPP_BASE_URL}/{number}?text={quote(text, safe='')}"


def order_update_message(order: Order, store_name: str) -> str:
    lines = [
        f"Hello {order.customer.name or 'there'},",
        f"{STATUS_LINES[order.status]} (Order {order.order_id})",
    ]
    if order.tracking_number and order.status == OrderStatus.SHIPPED:
        lines.append(f"Tracking number: {order.tracking_number}")
    if order.pricing is not None:
        lines.append(f"Order total: {format_inr(order.pricing.final_total, 2)}")
    lines.append(f"- {store_name}")
    return "\n".join(lines)
