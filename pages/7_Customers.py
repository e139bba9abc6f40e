import streamlit as st
import pandas as pd

from config import load_config
from data_integrator import LiveCollection
from domain.catalog import RECENT_CUSTOMER_DAYS, filter_customers, load_rows
from domain.models import Customer
from element_component import require_login
from utils.formatting import format_date

st.set_page_config(page_title="Customers", page_icon="👥", layout="wide")

require_login()
config = load_config()

st.sidebar.header("👥 Customers")
st.title("👥 Customers")


@st.fragment(run_every=config.live_refresh_seconds)
def customers_body():
    with LiveCollection("customers") as live:
        if not live.ok:
            st.error("Failed to load customers. Please try again.")
            return
        customers = load_rows(live.rows, Customer.from_row)

    col_search, col_recent = st.columns([3, 1])
    search = col_search.text_input("Search by name, email or phone...", key="customer_search")
    recent_only = col_recent.toggle(f"Joined in last {RECENT_CUSTOMER_DAYS} days", key="customer_recent")

    shown = filter_customers(customers, search, recent_only)
    st.caption(f"{len(shown)} of {len(customers)} customers")

    if not shown:
        st.info("No customers found")
        return

    df = pd.DataFrame(
        [
            {
                "Name": c.name,
                "Email": c.email,
                "Phone": c.phone,
                "Address": c.address.display(),
                "Joined": format_date(c.created_at),
            }
            for c in shown
        ]
    )
    st.dataframe(df, hide_index=True, width="stretch")


customers_body()
