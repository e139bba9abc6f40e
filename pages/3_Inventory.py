import datetime
from zoneinfo import ZoneInfo

import streamlit as st
import pandas as pd

from config import load_config
from data_integrator import LiveCollection
from domain.catalog import ALL, category_label, category_names, filter_products, load_rows, sort_by_serial
from domain.metrics import STOCK_LABELS, inventory_stats, stock_status
from domain.models import Category, Product
from element_component import flash, require_login
from services.inventory_service import export_csv, export_file_name, save_stock_changes
from utils.formatting import format_inr

st.set_page_config(page_title="Inventory", page_icon="📦", layout="wide")

require_login()
config = load_config()

st.sidebar.header("📦 Inventory")
st.title("📦 Inventory")


# products patched by the last save, rendered once in place of a fetch
SAVED_PRODUCTS_KEY = "inventory_saved_products"


def load_inventory():
    saved = st.session_state.pop(SAVED_PRODUCTS_KEY, None)
    with LiveCollection("categories") as categories_live:
        names = category_names(load_rows(categories_live.rows, Category.from_row))
    if saved is not None:
        return True, saved, names
    with LiveCollection("products") as products_live:
        if not products_live.ok:
            return False, [], names
        return True, sort_by_serial(load_rows(products_live.rows, Product.from_row)), names


@st.fragment(run_every=config.live_refresh_seconds)
def inventory_body():
    ok, products, names = load_inventory()
    if not ok:
        st.error("Failed to load inventory. Please try again.")
        return

    stats = inventory_stats(products)
    col_1, col_2, col_3, col_4 = st.columns(4)
    col_1.metric("Total Products", stats.total_products)
    col_2.metric("Stock Value", format_inr(stats.total_stock_value))
    col_3.metric("Low Stock", stats.low_stock_count)
    col_4.metric("Out of Stock", stats.out_of_stock_count)

    col_search, col_category, col_stock = st.columns([2, 1, 1])
    search = col_search.text_input("Search by name or SKU...", key="inventory_search")
    category_filter = col_category.selectbox(
        "Category", [ALL] + list(names),
        format_func=lambda v: "All categories" if v == ALL else names[v],
        key="inventory_category_filter",
    )
    stock_filter = col_stock.selectbox(
        "Stock", [ALL] + list(STOCK_LABELS),
        format_func=lambda v: "All stock" if v == ALL else STOCK_LABELS[v],
        key="inventory_stock_filter",
    )
    shown = filter_products(products, search, category_filter, stock_filter)

    today = datetime.datetime.now(ZoneInfo(config.timezone)).date()
    st.download_button(
        "Export CSV",
        data=export_csv(shown, names),
        file_name=export_file_name(today),
        mime="text/csv",
    )

    if not shown:
        st.info("No products match the current filters")
        return

    df = pd.DataFrame(
        [
            {
                "id": p.id,
                "Product": p.name,
                "SKU": p.sku,
                "Category": category_label(p.category_id, names),
                "Stock": p.stock,
                "Status": STOCK_LABELS[stock_status(p.stock)],
            }
            for p in shown
        ]
    )
    edited = st.data_editor(
        df,
        hide_index=True,
        width="stretch",
        column_config={
            "id": None,
            "Stock": st.column_config.NumberColumn("Stock", step=1, format="%d"),
        },
        disabled=["Product", "SKU", "Category", "Status"],
        key="inventory_table",
    )

    changed = [
        (row["id"], row["Stock"])
        for (_, row), original in zip(edited.iterrows(), df["Stock"])
        if row["Stock"] != original
    ]
    if changed and st.button(f"Save stock changes ({len(changed)})", type="primary"):
        patched, saved, failures = save_stock_changes(products, changed)
        for msg in failures:
            flash(False, msg)
        if saved:
            flash(True, f"Stock updated for {saved} product(s)")
        st.session_state[SAVED_PRODUCTS_KEY] = patched
        st.rerun()


inventory_body()
