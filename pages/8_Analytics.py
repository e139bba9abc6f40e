import datetime
from zoneinfo import ZoneInfo

import streamlit as st
import pandas as pd

from config import load_config
from data_integrator import LiveCollection
from domain.catalog import load_rows
from domain.metrics import (
    ANALYTICS_RANGES,
    DEFAULT_ANALYTICS_RANGE,
    analytics_window,
    growth_percent,
    in_window,
    order_revenue,
    previous_window,
    sales_trend,
    top_categories,
    top_products,
    window_summary,
)
from domain.models import Category, Order, Product
from element_component import require_login
from utils.formatting import format_date, format_inr, format_percent, humanize

st.set_page_config(page_title="Analytics", page_icon="📈", layout="wide")

require_login()
config = load_config()

st.sidebar.header("📈 Analytics")
st.title("📈 Analytics")

RANGE_LABELS = {
    "7days": "Last 7 days",
    "30days": "Last 30 days",
    "90days": "Last 90 days",
    "1year": "Last year",
}

range_keys = list(ANALYTICS_RANGES)
range_key = st.selectbox(
    "Time range",
    range_keys,
    index=range_keys.index(DEFAULT_ANALYTICS_RANGE),
    format_func=RANGE_LABELS.get,
)


def growth_delta(current: float, previous: float) -> str:
    growth = growth_percent(current, previous)
    sign = "-" if growth < 0 else "+"
    return f"{sign}{format_percent(growth)}"


@st.fragment(run_every=config.live_refresh_seconds)
def analytics_body():
    with LiveCollection("orders") as orders_live, \
            LiveCollection("products") as products_live, \
            LiveCollection("categories") as categories_live:
        if not orders_live.ok:
            st.error("Failed to load analytics. Please try again.")
            return
        orders = load_rows(orders_live.rows, Order.from_row)
        products = load_rows(products_live.rows, Product.from_row)
        categories = load_rows(categories_live.rows, Category.from_row)

    tz = ZoneInfo(config.timezone)
    now = datetime.datetime.now(datetime.timezone.utc)
    start, end = analytics_window(range_key, now)
    prev_start, prev_end = previous_window(start, end)

    current = [o for o in orders if in_window(o, start, end)]
    previous = [o for o in orders if in_window(o, prev_start, prev_end, end_inclusive=False)]

    summary = window_summary(current)
    prev = window_summary(previous)

    col_1, col_2, col_3, col_4 = st.columns(4)
    col_1.metric("Revenue", format_inr(summary.revenue), growth_delta(summary.revenue, prev.revenue))
    col_2.metric("Orders", summary.orders, growth_delta(summary.orders, prev.orders))
    col_3.metric("Customers", summary.customers, growth_delta(summary.customers, prev.customers))
    col_4.metric(
        "Avg Order Value",
        format_inr(summary.average_order_value),
        growth_delta(summary.average_order_value, prev.average_order_value),
    )

    st.divider()

    left, right = st.columns(2)
    with left:
        st.subheader("Top products")
        best = top_products(current)
        if best:
            st.dataframe(
                pd.DataFrame(
                    [{"Product": p["name"], "Units": p["sales"], "Revenue": format_inr(p["revenue"])} for p in best]
                ),
                hide_index=True,
                width="stretch",
            )
        else:
            st.info("No sales in this period")
    with right:
        st.subheader("Top categories")
        best_categories = top_categories(current, products, categories)
        if best_categories:
            st.dataframe(
                pd.DataFrame(
                    [
                        {"Category": c["name"], "Units": c["sales"], "Revenue": format_inr(c["revenue"])}
                        for c in best_categories
                    ]
                ),
                hide_index=True,
                width="stretch",
            )
        else:
            st.info("No sales in this period")

    st.subheader("Sales trend")
    trend = sales_trend(current, tz=tz)
    if trend:
        st.line_chart(pd.DataFrame(trend), x="date", y="revenue")
    else:
        st.info("No paid orders in this period")

    st.subheader("Recent orders")
    recent = sorted(
        (o for o in current if o.created_at is not None),
        key=lambda o: o.created_at,
        reverse=True,
    )[:10]
    if recent:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Order": o.order_id,
                        "Customer": o.customer.name,
                        "Total": format_inr(order_revenue(o)),
                        "Status": humanize(o.status.value),
                        "Date": format_date(o.created_at),
                    }
                    for o in recent
                ]
            ),
            hide_index=True,
            width="stretch",
        )
    else:
        st.info("No orders in this period")


analytics_body()
