# services/order_service.py

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import data_integrator
from domain.catalog import load_rows
from domain.metrics import count_with_status, new_customer_count, total_revenue
from domain.models import Order, OrderStatus
from domain.workflow import status_change, tracking_assignment, validate_tracking_number

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_orders(rows: List[Dict[str, Any]]) -> List[Order]:
    return load_rows(
        rows,
        Order.from_row,
        on_error=lambda row, e: logger.warning("Skipping order %s: %s", row.get("id"), e),
    )


def load_orders(filters=None) -> Tuple[bool, str, List[Order]]:
    ok, msg, rows = data_integrator.fetch_rows(ORDERS_TABLE, filters=filters)
    if not ok:
        return False, msg, []
    return True, msg, parse_orders(rows)


def update_order_status(order: Order, new_status: Any) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Overwrite the order's status. Prior state is not checked beyond the
    transition table, which allows every move.
    """
    try:
        changes = status_change(order.status, new_status, _now())
    except ValueError as e:
        return False, str(e), None

    ok, msg, row = data_integrator.update_row(ORDERS_TABLE, order.id, changes)
    if not ok:
        logger.error("Status update for order %s failed: %s", order.id, msg)
        return False, "Failed to update order status", None

    return True, f"Order status changed to {changes['status']}", row


def assign_tracking_number(order: Order, tracking_number: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Store a tracking number and mark the order shipped.

    Blank input is rejected before anything is sent to the database.
    """
    ok, msg = validate_tracking_number(tracking_number)
    if not ok:
        return False, msg, None

    changes = tracking_assignment(tracking_number, _now())
    ok, msg, row = data_integrator.update_row(ORDERS_TABLE, order.id, changes)
    if not ok:
        logger.error("Tracking update for order %s failed: %s", order.id, msg)
        return False, "Failed to update tracking number", None

    return True, "Tracking number added and order marked as shipped", row


def delete_order(order_id: str) -> Tuple[bool, str]:
    ok, msg = data_integrator.delete_row(ORDERS_TABLE, order_id)
    if not ok:
        logger.error("Deleting order %s failed: %s", order_id, msg)
        return False, "Failed to delete order"
    return True, "Order has been successfully deleted"


def delete_orders(order_ids: List[str]) -> Tuple[bool, str, int]:
    """
    Delete every selected order, or none of them.
    Returns (ok, message, deleted_count)
    """
    if not order_ids:
        return True, "No orders selected", 0

    ok, msg, deleted = data_integrator.delete_rows(ORDERS_TABLE, order_ids)
    if not ok:
        logger.error("Batch delete of %d orders failed: %s", len(order_ids), msg)
        return False, "Failed to delete orders", 0

    return True, f"Successfully deleted {deleted} order(s)", deleted


def order_summary(orders: List[Order]) -> Dict[str, Any]:
    return {
        "pending": count_with_status(orders, OrderStatus.PENDING),
        "shipped": count_with_status(orders, OrderStatus.SHIPPED),
        "new_customers": new_customer_count(orders),
        "revenue": total_revenue(orders),
    }
