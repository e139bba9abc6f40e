# domain/metrics.py
"""
Reducers that turn already-fetched orders and products into the numbers
shown on the dashboard, analytics and inventory screens.

None of these touch the network; callers pass in whatever snapshot they hold.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from domain.models import UNKNOWN_LABEL, Category, Order, OrderStatus, Product
from domain.pricing import effective_unit_price

# Two cost ratios are in use and have not been reconciled: the headline
# profit card assumes 80% of subtotal is cost, the monthly chart 60%.
HEADLINE_COST_RATIO = 0.8
MONTHLY_COST_RATIO = 0.6

LOW_STOCK_THRESHOLD = 10

OUT_OF_STOCK = "out"
LOW_STOCK = "low"
IN_STOCK = "in"

STOCK_LABELS = {
    OUT_OF_STOCK: "Out of Stock",
    LOW_STOCK: "Low Stock",
    IN_STOCK: "In Stock",
}

ANALYTICS_RANGES = {
    "7days": 7,
    "30days": 30,
    "90days": 90,
    "1year": 365,
}
DEFAULT_ANALYTICS_RANGE = "30days"

PAID = "paid"


# ---------------------------------------------------------------------------
# Revenue / profit
# ---------------------------------------------------------------------------

def order_revenue(order: Order) -> float:
    if order.pricing is not None:
        return order.pricing.final_total
    return order.total_amount or 0.0


def is_paid(order: Order) -> bool:
    return (order.payment_status or "").lower() == PAID


def total_revenue(orders: Iterable[Order], paid_only: bool = False) -> float:
    return sum(order_revenue(o) for o in orders if not paid_only or is_paid(o))


def order_profit(order: Order, cost_ratio: float) -> float:
    subtotal = order.pricing.subtotal if order.pricing is not None else 0.0
    return order_revenue(order) - subtotal * cost_ratio


def total_profit(orders: Iterable[Order], cost_ratio: float) -> float:
    return sum(order_profit(o, cost_ratio) for o in orders)


def average_order_value(revenue: float, order_count: int) -> float:
    if order_count <= 0:
        return 0.0
    return revenue / order_count


def growth_percent(current: float, previous: float) -> float:
    if not previous:
        return 0.0
    return (current - previous) / previous * 100


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------

def status_breakdown(orders: Iterable[Order]) -> Dict[str, int]:
    counts = Counter(o.status.value for o in orders)
    return {status.value: counts[status.value] for status in OrderStatus if counts[status.value]}


def count_with_status(orders: Iterable[Order], *statuses: OrderStatus) -> int:
    wanted = set(statuses)
    return sum(1 for o in orders if o.status in wanted)


def pending_count(orders: Iterable[Order]) -> int:
    return count_with_status(orders, OrderStatus.PENDING, OrderStatus.PROCESSING)


def new_customer_count(orders: Iterable[Order]) -> int:
    return sum(1 for o in orders if o.flags.is_new_customer)


def unique_customers(orders: Iterable[Order]) -> int:
    keys = set()
    for o in orders:
        key = o.customer_id or o.customer.phone or o.customer.name
        if key:
            keys.add(key)
    return len(keys)


@dataclass
class WindowSummary:
    revenue: float
    orders: int
    customers: int
    average_order_value: float


def window_summary(orders: Sequence[Order]) -> WindowSummary:
    """
    Headline numbers for one analytics window. Revenue counts paid orders
    only; the order count and AOV divisor count every order in the window.
    """
    revenue = total_revenue(orders, paid_only=True)
    return WindowSummary(
        revenue=revenue,
        orders=len(orders),
        customers=unique_customers(orders),
        average_order_value=average_order_value(revenue, len(orders)),
    )


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------

def stock_status(stock: int) -> str:
    if stock <= 0:
        return OUT_OF_STOCK
    if stock <= LOW_STOCK_THRESHOLD:
        return LOW_STOCK
    return IN_STOCK


def low_stock_count(products: Iterable[Product]) -> int:
    return sum(1 for p in products if stock_status(p.stock) == LOW_STOCK)


def out_of_stock_count(products: Iterable[Product]) -> int:
    return sum(1 for p in products if stock_status(p.stock) == OUT_OF_STOCK)


@dataclass
class InventoryStats:
    total_products: int
    total_units: int
    total_stock_value: float
    low_stock_count: int
    out_of_stock_count: int


def inventory_stats(products: Sequence[Product]) -> InventoryStats:
    return InventoryStats(
        total_products=len(products),
        total_units=sum(p.stock for p in products),
        total_stock_value=sum(effective_unit_price(p) * p.stock for p in products),
        low_stock_count=low_stock_count(products),
        out_of_stock_count=out_of_stock_count(products),
    )


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------

def _local_date(order: Order, tz: Optional[tzinfo]) -> Optional[date]:
    if order.created_at is None:
        return None
    ts = order.created_at.astimezone(tz) if tz else order.created_at
    return ts.date()


def daily_series(
        orders: Iterable[Order],
        today: date,
        days: int = 7,
        tz: Optional[tzinfo] = None,
) -> List[Dict]:
    """
    One bucket per day for the `days` days ending `today`, oldest first.
    Days without orders are present with zero revenue.
    """
    buckets = {
        today - timedelta(days=offset): {"revenue": 0.0, "orders": 0}
        for offset in range(days - 1, -1, -1)
    }
    for order in orders:
        day = _local_date(order, tz)
        if day in buckets:
            buckets[day]["revenue"] += order_revenue(order)
            buckets[day]["orders"] += 1

    return [
        {
            "date": day,
            "day": day.strftime("%a"),
            "revenue": round(values["revenue"]),
            "orders": values["orders"],
        }
        for day, values in sorted(buckets.items())
    ]


def _month_index(d: date) -> int:
    return d.year * 12 + d.month - 1


def monthly_series(
        orders: Iterable[Order],
        today: date,
        months: int = 6,
        tz: Optional[tzinfo] = None,
        cost_ratio: float = MONTHLY_COST_RATIO,
) -> List[Dict]:
    """
    One bucket per calendar month for the `months` months ending with the
    month of `today`, oldest first, zero-filled.
    """
    current = _month_index(today)
    buckets = {
        idx: {"revenue": 0.0, "profit": 0.0, "orders": 0}
        for idx in range(current - months + 1, current + 1)
    }
    for order in orders:
        day = _local_date(order, tz)
        if day is None:
            continue
        idx = _month_index(day)
        if idx in buckets:
            buckets[idx]["revenue"] += order_revenue(order)
            buckets[idx]["profit"] += order_profit(order, cost_ratio)
            buckets[idx]["orders"] += 1

    series = []
    for idx, values in sorted(buckets.items()):
        first_day = date(idx // 12, idx % 12 + 1, 1)
        series.append({
            "month_start": first_day,
            "month": first_day.strftime("%b"),
            "revenue": round(values["revenue"]),
            "profit": round(values["profit"]),
            "orders": values["orders"],
        })
    return series


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

def analytics_window(range_key: str, now: datetime) -> Tuple[datetime, datetime]:
    if range_key == "1year":
        try:
            start = now.replace(year=now.year - 1)
        except ValueError:
            # Feb 29
            start = now.replace(year=now.year - 1, day=28)
        return start, now
    days = ANALYTICS_RANGES.get(range_key, ANALYTICS_RANGES[DEFAULT_ANALYTICS_RANGE])
    return now - timedelta(days=days), now


def previous_window(start: datetime, end: datetime) -> Tuple[datetime, datetime]:
    """The window of equal whole-day length ending where `start` begins."""
    span = timedelta(days=(end - start).days)
    return start - span, start


def in_window(order: Order, start: datetime, end: datetime, end_inclusive: bool = True) -> bool:
    if order.created_at is None:
        return False
    if order.created_at < start:
        return False
    return order.created_at <= end if end_inclusive else order.created_at < end


def top_products(orders: Iterable[Order], limit: int = 5) -> List[Dict]:
    sales: Dict[str, Dict] = {}
    for order in orders:
        for item in order.items:
            entry = sales.setdefault(
                item.product_id,
                {"name": item.product_name or UNKNOWN_LABEL, "sales": 0, "revenue": 0.0},
            )
            entry["sales"] += item.quantity
            entry["revenue"] += item.line_total
    return sorted(sales.values(), key=lambda e: e["revenue"], reverse=True)[:limit]


def top_categories(
        orders: Iterable[Order],
        products: Iterable[Product],
        categories: Iterable[Category],
        limit: int = 5,
) -> List[Dict]:
    """
    Items whose product is not (yet) loaded are skipped; products whose
    category is missing are grouped under the placeholder label.
    """
    products_by_id = {p.id: p for p in products}
    category_names = {c.id: c.name for c in categories}

    sales: Dict[str, Dict] = {}
    for order in orders:
        for item in order.items:
            product = products_by_id.get(item.product_id)
            if product is None:
                continue
            name = category_names.get(product.category_id, UNKNOWN_LABEL)
            key = product.category_id if product.category_id in category_names else UNKNOWN_LABEL
            entry = sales.setdefault(key, {"name": name, "sales": 0, "revenue": 0.0})
            entry["sales"] += item.quantity
            entry["revenue"] += item.line_total
    return sorted(sales.values(), key=lambda e: e["revenue"], reverse=True)[:limit]


def sales_trend(orders: Iterable[Order], max_points: int = 30, tz: Optional[tzinfo] = None) -> List[Dict]:
    points: Dict[date, Dict] = {}
    for order in orders:
        if not is_paid(order):
            continue
        day = _local_date(order, tz)
        if day is None:
            continue
        entry = points.setdefault(day, {"date": day, "revenue": 0.0, "orders": 0})
        entry["revenue"] += order_revenue(order)
        entry["orders"] += 1
    return [points[d] for d in sorted(points)][-max_points:]
