import streamlit as st
import pandas as pd

from domain.models import BulkPricingTier
from element_component import confirmation_dialog, report, require_login
from services.bulk_service import (
    DEFAULT_TIER,
    PAYMENT_TERMS,
    delete_bulk_pricing,
    delete_wholesale_account,
    load_bulk_pricing,
    load_wholesale_accounts,
    save_bulk_pricing,
    save_wholesale_account,
)
from utils.coercion import to_optional_int
from utils.formatting import format_inr, format_percent

st.set_page_config(page_title="Bulk Orders", page_icon="🏭", layout="wide")

require_login()

st.sidebar.header("🏭 Bulk Orders")
st.title("🏭 Bulk Orders")


def tiers_from_frame(frame: pd.DataFrame):
    tiers = []
    for _, row in frame.dropna(how="all").iterrows():
        if pd.isna(row["Min Qty"]) or pd.isna(row["Discount %"]):
            continue
        max_qty = None if pd.isna(row["Max Qty"]) else to_optional_int(row["Max Qty"])
        tiers.append(
            BulkPricingTier(
                min_quantity=int(row["Min Qty"]),
                max_quantity=max_qty,
                discount_percentage=float(row["Discount %"]),
            )
        )
    return tiers


def tiers_frame(tiers):
    return pd.DataFrame(
        [
            {"Min Qty": t.min_quantity, "Max Qty": t.max_quantity, "Discount %": t.discount_percentage}
            for t in tiers
        ],
        columns=["Min Qty", "Max Qty", "Discount %"],
    )


def pricing_form(pricing):
    key = pricing.id if pricing else "new"
    name = st.text_input("Pricing Name", value=pricing.name if pricing else "", key=f"bp_name_{key}")
    description = st.text_area("Description", value=pricing.description if pricing else "", key=f"bp_desc_{key}")
    is_active = st.checkbox("Active", value=pricing.is_active if pricing else True, key=f"bp_active_{key}")
    st.caption("Quantity tiers (leave Max Qty empty for no upper limit)")
    edited = st.data_editor(
        tiers_frame(pricing.tiers if pricing else [DEFAULT_TIER]),
        num_rows="dynamic",
        hide_index=True,
        column_config={
            "Min Qty": st.column_config.NumberColumn(min_value=0, step=1, format="%d"),
            "Max Qty": st.column_config.NumberColumn(min_value=0, step=1, format="%d"),
            "Discount %": st.column_config.NumberColumn(min_value=0.0, max_value=100.0, step=0.5),
        },
        key=f"bp_tiers_{key}",
    )
    if st.button("Update Pricing" if pricing else "Create Pricing", type="primary", key=f"bp_save_{key}"):
        ok, msg, _ = save_bulk_pricing(
            name, description, tiers_from_frame(edited), is_active,
            pricing_id=pricing.id if pricing else None,
        )
        report(ok, msg)


def account_form(account):
    key = account.id if account else "new"
    with st.form(f"account_form_{key}", clear_on_submit=account is None):
        col_1, col_2 = st.columns(2)
        with col_1:
            company_name = st.text_input("Company Name", value=account.company_name if account else "")
            contact_person = st.text_input("Contact Person", value=account.contact_person if account else "")
            email = st.text_input("Email", value=account.email if account else "")
            phone = st.text_input("Phone", value=account.phone if account else "")
        with col_2:
            gst_number = st.text_input("GST Number", value=account.gst_number if account else "")
            discount_rate = st.number_input("Discount Rate (%)", min_value=0.0, max_value=100.0, step=0.5,
                                            value=float(account.discount_rate) if account else 0.0)
            credit_limit = st.number_input("Credit Limit (₹)", min_value=0.0, step=1000.0,
                                           value=float(account.credit_limit) if account else 0.0)
            terms = list(PAYMENT_TERMS)
            current_terms = account.payment_terms if account and account.payment_terms in terms else "30 days"
            payment_terms = st.selectbox("Payment Terms", terms, index=terms.index(current_terms))
        address = st.text_area("Address", value=account.address if account else "")
        is_active = st.checkbox("Active", value=account.is_active if account else True)
        submitted = st.form_submit_button("Update Account" if account else "Create Account", type="primary")

    if submitted:
        form = {
            "company_name": company_name,
            "contact_person": contact_person,
            "email": email,
            "phone": phone,
            "gst_number": gst_number,
            "discount_rate": discount_rate,
            "credit_limit": credit_limit,
            "payment_terms": payment_terms,
            "address": address,
            "is_active": is_active,
        }
        ok, msg, _ = save_wholesale_account(form, account.id if account else None)
        report(ok, msg)


tab_pricing, tab_accounts = st.tabs(["Pricing Tiers", "Wholesale Accounts"])

# -------------------------------------------------------------------
# Pricing tiers
# -------------------------------------------------------------------

with tab_pricing:
    with st.expander("➕ New Bulk Pricing"):
        pricing_form(None)

    ok, msg, pricings = load_bulk_pricing()
    if not ok:
        st.error("Failed to load bulk pricing. Please try again.")
    elif not pricings:
        st.info("No bulk pricing yet. Create tiers to reward large orders.")

    for pricing in pricings:
        with st.container(border=True):
            st.markdown(f"**{pricing.name}** {'' if pricing.is_active else '· _inactive_'}")
            if pricing.description:
                st.caption(pricing.description)
            st.dataframe(
                pd.DataFrame(
                    [
                        {
                            "Quantity": f"{t.min_quantity}+" if t.max_quantity is None
                            else f"{t.min_quantity} - {t.max_quantity}",
                            "Discount": format_percent(t.discount_percentage),
                        }
                        for t in pricing.tiers
                    ]
                ),
                hide_index=True,
            )
            with st.expander("Edit"):
                pricing_form(pricing)
            if st.button("Delete", key=f"bp_delete_{pricing.id}"):
                confirmation_dialog(
                    f"Delete bulk pricing '{pricing.name}'?",
                    lambda pid=pricing.id: delete_bulk_pricing(pid),
                )

# -------------------------------------------------------------------
# Wholesale accounts
# -------------------------------------------------------------------

with tab_accounts:
    with st.expander("➕ New Wholesale Account"):
        account_form(None)

    ok, msg, accounts = load_wholesale_accounts()
    if not ok:
        st.error("Failed to load wholesale accounts. Please try again.")
    elif not accounts:
        st.info("No wholesale accounts yet.")
    else:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Company": a.company_name,
                        "Contact": a.contact_person,
                        "Phone": a.phone,
                        "GST": a.gst_number,
                        "Discount": format_percent(a.discount_rate),
                        "Credit Limit": format_inr(a.credit_limit),
                        "Terms": a.payment_terms,
                        "Active": a.is_active,
                    }
                    for a in accounts
                ]
            ),
            hide_index=True,
            width="stretch",
        )

        labels = {a.id: a.company_name for a in accounts}
        selected_id = st.selectbox("Select account", list(labels), format_func=labels.get)
        selected = next(a for a in accounts if a.id == selected_id)
        with st.expander("Edit account"):
            account_form(selected)
        if st.button("Delete account"):
            confirmation_dialog(
                f"Delete wholesale account '{selected.company_name}'?",
                lambda: delete_wholesale_account(selected_id),
            )
