from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from conftest import make_order
from domain.metrics import (
    HEADLINE_COST_RATIO,
    IN_STOCK,
    LOW_STOCK,
    MONTHLY_COST_RATIO,
    OUT_OF_STOCK,
    analytics_window,
    average_order_value,
    daily_series,
    growth_percent,
    in_window,
    inventory_stats,
    low_stock_count,
    monthly_series,
    order_revenue,
    out_of_stock_count,
    pending_count,
    previous_window,
    sales_trend,
    status_breakdown,
    stock_status,
    top_categories,
    top_products,
    total_profit,
    total_revenue,
    unique_customers,
    window_summary,
)
from domain.models import Category, Order, Product


def product(pid, stock, price=100.0, category_id="c1", sale_price=None):
    return Product(id=pid, name=pid, price=price, stock=stock, category_id=category_id, sale_price=sale_price)


def item(pid, qty, line_total, name=None):
    return {
        "product_id": pid,
        "quantity": qty,
        "unit_price": line_total / qty,
        "line_total": line_total,
        "product_details": {"name": name or pid},
    }


@pytest.mark.parametrize(
    "stock,expected",
    [(0, OUT_OF_STOCK), (-1, OUT_OF_STOCK), (-3, OUT_OF_STOCK), (1, LOW_STOCK), (10, LOW_STOCK), (11, IN_STOCK)],
)
def test_stock_thresholds(stock, expected):
    assert stock_status(stock) == expected


def test_stock_counts():
    products = [product("a", 0), product("b", 10), product("c", 11), product("d", 5)]
    assert low_stock_count(products) == 2
    assert out_of_stock_count(products) == 1


def test_inventory_stats_uses_effective_price():
    stats = inventory_stats([product("a", 2, price=100, sale_price=80), product("b", 3, price=10)])
    assert stats.total_products == 2
    assert stats.total_units == 5
    assert stats.total_stock_value == 2 * 80 + 3 * 10


def test_negative_stock_counts_as_out_of_stock():
    products = [product("oversold", -1), product("empty", 0), product("few", 1)]
    assert out_of_stock_count(products) == 2
    assert low_stock_count(products) == 1


def test_average_order_value_empty():
    assert average_order_value(0, 0) == 0
    assert average_order_value(300, 3) == 100


def test_growth_percent():
    assert growth_percent(150, 0) == 0
    assert growth_percent(150, 100) == 50
    assert growth_percent(50, 100) == -50


def test_revenue_falls_back_to_legacy_total():
    legacy = Order.from_row({"id": "x1", "status": "delivered", "total_amount": 420})
    assert legacy.pricing is None
    assert order_revenue(legacy) == 420
    assert total_revenue([legacy, make_order(final_total=80)]) == 500


def test_paid_only_revenue():
    orders = [make_order(final_total=100, payment_status="paid"), make_order(final_total=50)]
    assert total_revenue(orders, paid_only=True) == 100


def test_profit_ratios_stay_separate():
    orders = [make_order(final_total=1000, subtotal=1000)]
    assert total_profit(orders, HEADLINE_COST_RATIO) == pytest.approx(200)
    assert total_profit(orders, MONTHLY_COST_RATIO) == pytest.approx(400)


def test_status_counts():
    orders = [
        make_order(status="pending"),
        make_order(status="processing"),
        make_order(status="processing"),
        make_order(status="shipped"),
    ]
    assert pending_count(orders) == 3
    assert status_breakdown(orders) == {"pending": 1, "processing": 2, "shipped": 1}


def test_daily_series_is_zero_filled():
    today = date(2026, 10, 18)
    orders = [
        make_order(final_total=100, created_at="2026-10-18T05:00:00+00:00"),
        make_order(final_total=50, created_at="2026-10-18T06:00:00+00:00"),
        make_order(final_total=70, created_at="2026-10-12T06:00:00+00:00"),
        make_order(final_total=999, created_at="2026-10-01T06:00:00+00:00"),
        make_order(final_total=999, created_at=None),
    ]
    series = daily_series(orders, today)
    assert len(series) == 7
    assert series[0]["date"] == date(2026, 10, 12)
    assert series[-1]["date"] == today
    assert series[0]["revenue"] == 70
    assert series[-1]["revenue"] == 150
    assert series[-1]["orders"] == 2
    assert [s["revenue"] for s in series[1:-1]] == [0] * 5


def test_daily_series_uses_local_day():
    # 20:00 UTC on the 17th is already the 18th in India
    orders = [make_order(final_total=10, created_at="2026-10-17T20:00:00+00:00")]
    series = daily_series(orders, date(2026, 10, 18), tz=ZoneInfo("Asia/Kolkata"))
    assert series[-1]["revenue"] == 10


def test_monthly_series_spans_year_boundary():
    orders = [
        make_order(final_total=1000, subtotal=1000, created_at="2025-12-05T00:00:00+00:00"),
        make_order(final_total=500, subtotal=500, created_at="2026-03-05T00:00:00+00:00"),
    ]
    series = monthly_series(orders, date(2026, 3, 20))
    assert [s["month"] for s in series] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert series[2]["revenue"] == 1000
    assert series[2]["profit"] == 400
    assert series[-1]["orders"] == 1
    assert series[0]["revenue"] == 0


def test_empty_series():
    assert all(s["revenue"] == 0 for s in daily_series([], date(2026, 1, 1)))
    assert len(monthly_series([], date(2026, 1, 1))) == 6


def test_analytics_windows(now):
    start, end = analytics_window("7days", now)
    assert (end - start).days == 7
    prev_start, prev_end = previous_window(start, end)
    assert prev_end == start
    assert (prev_end - prev_start).days == 7

    start, _ = analytics_window("unknown", now)
    assert (now - start).days == 30


def test_one_year_window_from_leap_day():
    leap = datetime(2028, 2, 29, tzinfo=timezone.utc)
    start, _ = analytics_window("1year", leap)
    assert start == datetime(2027, 2, 28, tzinfo=timezone.utc)


def test_in_window_bounds(now):
    order = make_order(created_at=now.isoformat())
    assert in_window(order, now, now)
    assert not in_window(order, now, now, end_inclusive=False)
    assert not in_window(make_order(created_at=None), now, now)


def test_unique_customers():
    orders = [
        make_order(customer_id="u1"),
        make_order(customer_id="u1"),
        make_order(customer_id="u2"),
    ]
    assert unique_customers(orders) == 2


def test_top_products_and_categories():
    orders = [
        make_order(items=[item("p1", 2, 200), item("p2", 1, 500)]),
        make_order(items=[item("p1", 1, 100), item("ghost", 1, 1000)]),
    ]
    products = [product("p1", 5, category_id="c1"), product("p2", 5, category_id="gone")]
    categories = [Category(id="c1", name="Floor Care")]

    best = top_products(orders)
    assert best[0]["revenue"] == 1000
    assert best[1] == {"name": "p2", "sales": 1, "revenue": 500}
    assert best[2] == {"name": "p1", "sales": 3, "revenue": 300}

    cats = top_categories(orders, products, categories)
    assert cats == [
        {"name": "Unknown", "sales": 1, "revenue": 500},
        {"name": "Floor Care", "sales": 3, "revenue": 300},
    ]


def test_sales_trend_paid_only():
    orders = [
        make_order(final_total=100, payment_status="paid", created_at="2026-10-01T10:00:00+00:00"),
        make_order(final_total=40, payment_status="paid", created_at="2026-10-01T12:00:00+00:00"),
        make_order(final_total=70, created_at="2026-10-02T10:00:00+00:00"),
    ]
    trend = sales_trend(orders)
    assert trend == [{"date": date(2026, 10, 1), "revenue": 140, "orders": 2}]


def test_sales_trend_keeps_last_points():
    orders = [
        make_order(final_total=1, payment_status="paid", created_at=f"2026-08-{d:02d}T10:00:00+00:00")
        for d in range(1, 32)
    ]
    trend = sales_trend(orders, max_points=30)
    assert len(trend) == 30
    assert trend[0]["date"] == date(2026, 8, 2)


def test_window_summary_divides_paid_revenue_by_every_order():
    orders = [
        make_order(row_id="a1", final_total=300, payment_status="paid"),
        make_order(row_id="b2", final_total=200),
        make_order(row_id="c3", final_total=100, payment_status="paid"),
    ]
    summary = window_summary(orders)
    assert summary.revenue == 400
    assert summary.orders == 3
    assert summary.average_order_value == pytest.approx(400 / 3)


def test_window_summary_empty():
    summary = window_summary([])
    assert summary.revenue == 0
    assert summary.orders == 0
    assert summary.customers == 0
    assert summary.average_order_value == 0
