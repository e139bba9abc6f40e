import streamlit as st
import streamlit.components.v1 as components
import pandas as pd

from config import load_config
from data_integrator import LiveCollection
from domain.catalog import ALL, filter_orders
from domain.metrics import order_revenue
from domain.models import OrderStatus
from domain.workflow import shows_tracking_control
from element_component import confirmation_dialog, report, require_login
from services.invoice_service import (
    build_invoice,
    invoice_file_name,
    render_invoice_docx,
    render_invoice_html,
)
from services.messaging_service import order_update_message, whatsapp_link
from services.order_service import (
    assign_tracking_number,
    delete_order,
    delete_orders,
    order_summary,
    parse_orders,
    update_order_status,
)
from services.settings_service import SettingsService
from utils.formatting import format_date, format_inr, humanize

st.set_page_config(page_title="Orders", page_icon="🧾", layout="wide")

principal = require_login()
config = load_config()

st.sidebar.header("🧾 Orders")
st.title("🧾 Orders")

STATUS_OPTIONS = [s.value for s in OrderStatus]

if "selected_order_ids" not in st.session_state:
    st.session_state["selected_order_ids"] = []

_, _, store_settings = SettingsService(principal.user_id).load_store()


def order_details(order):
    st.subheader(f"Order {order.order_id}")

    col_a, col_b, col_c = st.columns(3)
    col_a.markdown(f"**Status:** {humanize(order.status.value)}")
    col_b.markdown(f"**Payment:** {humanize(order.payment_method)}")
    col_c.markdown(f"**Priority:** {humanize(order.flags.priority)}")
    if order.tracking_number:
        st.markdown(f"**Tracking:** `{order.tracking_number}`")
    if order.flags.requires_verification:
        st.warning("Requires Verification")

    st.markdown(
        f"**Customer:** {order.customer.name} · {order.customer.phone}"
        + (" · 🆕 New customer" if order.flags.is_new_customer else "")
    )
    st.caption(order.customer.address.display() or "No address")

    df_items = pd.DataFrame(
        [
            {
                "Item": i.product_name or i.product_id,
                "Qty": i.quantity,
                "Unit Price": format_inr(i.unit_price, 2),
                "Discount / unit": format_inr(i.bulk_discount_per_unit, 2),
                "Final Unit Price": format_inr(i.final_unit_price, 2),
                "Line Total": format_inr(i.line_total, 2),
            }
            for i in order.items
        ]
    )
    st.dataframe(df_items, hide_index=True, width="stretch")

    if order.pricing is not None:
        p = order.pricing
        st.markdown(
            f"Subtotal: **{format_inr(p.subtotal, 2)}** · "
            f"Bulk discount: **-{format_inr(p.bulk_discount_total, 2)}** · "
            f"Shipping: **{format_inr(p.shipping_cost, 2)}** · "
            f"Total: **{format_inr(p.final_total, 2)}**"
        )

    # -------------------------------------------------------------------
    # Admin actions
    # -------------------------------------------------------------------
    col_status, col_track = st.columns(2)

    with col_status:
        new_status = st.selectbox(
            "Change status",
            STATUS_OPTIONS,
            index=STATUS_OPTIONS.index(order.status.value),
            key=f"status_{order.id}",
        )
        if st.button("Update Status", key=f"update_status_{order.id}"):
            ok, msg, _ = update_order_status(order, new_status)
            report(ok, msg)

    with col_track:
        if shows_tracking_control(order.status):
            tracking = st.text_input("Tracking number", key=f"tracking_{order.id}",
                                     placeholder="Enter tracking number")
            if st.button("Ship Order", key=f"ship_{order.id}"):
                ok, msg, _ = assign_tracking_number(order, tracking)
                if ok:
                    report(ok, msg)
                else:
                    st.error(msg)

    invoice = build_invoice(order, store_settings)
    invoice_html = render_invoice_html(invoice)
    with st.expander("Invoice preview"):
        components.html(invoice_html, height=700, scrolling=True)

    col_html, col_docx, col_wa = st.columns(3)
    with col_html:
        st.download_button(
            "Invoice (HTML)",
            data=invoice_html,
            file_name=invoice_file_name(invoice, "html"),
            mime="text/html",
            key=f"invoice_html_{order.id}",
        )
    with col_docx:
        st.download_button(
            "Invoice (Word)",
            data=render_invoice_docx(invoice),
            file_name=invoice_file_name(invoice, "docx"),
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            key=f"invoice_docx_{order.id}",
        )
    with col_wa:
        link = whatsapp_link(order.customer.phone, order_update_message(order, store_settings.store_name))
        if link:
            st.link_button("Message on WhatsApp", link)
        else:
            st.caption("No valid phone number for WhatsApp")


@st.fragment(run_every=config.live_refresh_seconds)
def orders_body():
    with LiveCollection("orders") as live:
        if not live.ok:
            st.error("Failed to load orders. Please try again.")
            return
        orders = parse_orders(live.rows)

    summary = order_summary(orders)
    col_1, col_2, col_3, col_4 = st.columns(4)
    col_1.metric("Pending", summary["pending"])
    col_2.metric("Shipped", summary["shipped"])
    col_3.metric("New Customers", summary["new_customers"])
    col_4.metric("Revenue", format_inr(summary["revenue"]))

    col_search, col_filter = st.columns([3, 1])
    search = col_search.text_input("Search orders...", key="order_search",
                                   placeholder="Order number, customer name or phone")
    status_filter = col_filter.selectbox("Status", [ALL] + STATUS_OPTIONS, key="order_status_filter")

    filtered = filter_orders(orders, search, status_filter)

    if not filtered:
        if search or status_filter != ALL:
            st.info("No orders found. Try adjusting your filters")
        else:
            st.info("Orders will appear here when customers make purchases")
        return

    df = pd.DataFrame(
        [
            {
                "Select": o.id in st.session_state["selected_order_ids"],
                "Order": o.order_id,
                "Customer": o.customer.name,
                "Phone": o.customer.phone,
                "Total": format_inr(order_revenue(o)),
                "Status": humanize(o.status.value),
                "Payment": humanize(o.payment_method),
                "Priority": humanize(o.flags.priority),
                "Date": format_date(o.created_at),
                "id": o.id,
            }
            for o in filtered
        ]
    )
    edited = st.data_editor(
        df,
        hide_index=True,
        width="stretch",
        column_config={"id": None},
        disabled=[c for c in df.columns if c != "Select"],
        key="orders_table",
    )
    selected = edited.loc[edited["Select"], "id"].tolist()
    st.session_state["selected_order_ids"] = selected

    col_open, col_del_one, col_del_many = st.columns(3)
    with col_open:
        labels = {o.id: f"{o.order_id} · {o.customer.name}" for o in filtered}
        open_id = st.selectbox("Open order", list(labels), format_func=labels.get, key="open_order_select")
    with col_del_one:
        if st.button("Delete this order"):
            confirmation_dialog(
                "Delete this order? This cannot be undone.",
                lambda: delete_order(open_id),
            )
    with col_del_many:
        if selected and st.button(f"Delete Selected ({len(selected)})", type="primary"):
            def _delete_selected():
                ok, msg, _ = delete_orders(selected)
                if ok:
                    st.session_state["selected_order_ids"] = []
                return ok, msg

            confirmation_dialog(
                f"Delete {len(selected)} order(s)? Either all of them are removed or none are.",
                _delete_selected,
                confirm_label="Delete Orders",
            )

    st.divider()
    order = next((o for o in filtered if o.id == open_id), None)
    if order is not None:
        order_details(order)


orders_body()
