import datetime
from zoneinfo import ZoneInfo

import pandas as pd
import streamlit as st

from config import load_config
from data_integrator import LiveCollection
from domain.metrics import (
    HEADLINE_COST_RATIO,
    average_order_value,
    daily_series,
    low_stock_count,
    monthly_series,
    new_customer_count,
    pending_count,
    status_breakdown,
    total_profit,
    total_revenue,
)
from domain.models import Category, Order, Product
from domain.catalog import load_rows
from element_component import require_login
from utils.formatting import format_inr

st.set_page_config(
    page_title="Admin Dashboard",
    page_icon="📊",
    layout="wide",
)

require_login()
config = load_config()

st.sidebar.header("📊 Dashboard")
st.title("📊 Dashboard")


@st.fragment(run_every=config.live_refresh_seconds)
def dashboard_body():
    with LiveCollection("orders") as orders_live, \
            LiveCollection("products") as products_live, \
            LiveCollection("categories") as categories_live:
        if not (orders_live.ok and products_live.ok and categories_live.ok):
            st.error("Failed to load dashboard data. Please try again.")
            return
        orders = load_rows(orders_live.rows, Order.from_row)
        products = load_rows(products_live.rows, Product.from_row)
        categories = load_rows(categories_live.rows, Category.from_row)

    tz = ZoneInfo(config.timezone)
    today = datetime.datetime.now(tz).date()

    revenue = total_revenue(orders)
    profit = total_profit(orders, HEADLINE_COST_RATIO)

    # -------------------------------------------------------------------
    # Main metrics
    # -------------------------------------------------------------------
    col_1, col_2, col_3, col_4 = st.columns(4)
    col_1.metric("Total Revenue", format_inr(revenue))
    col_2.metric("Total Profit", format_inr(profit))
    col_3.metric("Total Orders", len(orders))
    col_4.metric("Avg Order Value", format_inr(average_order_value(revenue, len(orders))))

    col_5, col_6, col_7, col_8 = st.columns(4)
    col_5.metric("Products", len(products))
    col_6.metric("Categories", len(categories))
    col_7.metric("Pending Orders", pending_count(orders))
    col_8.metric("Low Stock Products", low_stock_count(products))
    st.caption(f"New customers: **{new_customer_count(orders)}** · "
               f"Last updated: {datetime.datetime.now(tz).strftime('%d %b %Y %H:%M:%S')}")

    st.divider()

    # -------------------------------------------------------------------
    # Charts
    # -------------------------------------------------------------------
    left, right = st.columns(2)

    with left:
        st.subheader("Last 7 days")
        weekly = pd.DataFrame(daily_series(orders, today, tz=tz))
        st.bar_chart(weekly, x="date", y="revenue")
        st.caption(f"{int(weekly['orders'].sum())} orders this week")

    with right:
        st.subheader("Last 6 months")
        monthly = pd.DataFrame(monthly_series(orders, today, tz=tz))
        st.line_chart(monthly, x="month", y=["revenue", "profit"])

    st.subheader("Order status")
    breakdown = status_breakdown(orders)
    if breakdown:
        df_status = pd.DataFrame(
            [{"Status": k.capitalize(), "Orders": v} for k, v in breakdown.items()]
        )
        st.dataframe(df_status, hide_index=True, width="stretch")
    else:
        st.info("No orders yet.")


dashboard_body()
