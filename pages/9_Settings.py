import dataclasses

import streamlit as st

from domain.models import NotificationSettings, SecuritySettings, StoreSettings
from element_component import PRINCIPAL_KEY, report, require_login
from services.auth_service import sign_out
from services.settings_service import SettingsService

st.set_page_config(page_title="Settings", page_icon="⚙️")

principal = require_login()
service = SettingsService(updated_by=principal.email or principal.user_id)

st.sidebar.header("⚙️ Settings")
st.title("⚙️ Settings")

tab_store, tab_notifications, tab_security, tab_profile = st.tabs(
    ["Store", "Notifications", "Security", "Profile"]
)

# -------------------------------------------------------------------
# Store
# -------------------------------------------------------------------

with tab_store:
    ok, msg, store = service.load_store()
    if not ok:
        st.error("Failed to load store settings. Showing defaults.")

    with st.form("store_settings"):
        store_name = st.text_input("Store Name", value=store.store_name)
        store_description = st.text_area("Description", value=store.store_description)
        store_address = st.text_area("Address", value=store.store_address)
        col_1, col_2 = st.columns(2)
        store_phone = col_1.text_input("Phone", value=store.store_phone)
        store_email = col_2.text_input("Email", value=store.store_email)
        currency = col_1.text_input("Currency", value=store.currency)
        timezone = col_2.text_input("Timezone", value=store.timezone)
        tax_rate = col_1.number_input("Tax Rate (%)", min_value=0.0, step=0.5, value=float(store.tax_rate))
        shipping_cost = col_2.number_input("Shipping Cost (₹)", min_value=0.0, step=5.0,
                                           value=float(store.shipping_cost))
        free_shipping_threshold = st.number_input("Free Shipping Above (₹)", min_value=0.0, step=50.0,
                                                  value=float(store.free_shipping_threshold))
        submitted = st.form_submit_button("Save Store Settings", type="primary")

    if submitted:
        ok, msg = service.save_store(
            StoreSettings(
                store_name=store_name,
                store_description=store_description,
                store_address=store_address,
                store_phone=store_phone,
                store_email=store_email,
                currency=currency,
                timezone=timezone,
                tax_rate=tax_rate,
                shipping_cost=shipping_cost,
                free_shipping_threshold=free_shipping_threshold,
            )
        )
        report(ok, msg)

# -------------------------------------------------------------------
# Notifications
# -------------------------------------------------------------------

NOTIFICATION_LABELS = {
    "email_notifications": "Email notifications",
    "order_notifications": "New order alerts",
    "stock_alerts": "Low stock alerts",
    "daily_reports": "Daily sales report",
    "marketing_emails": "Marketing emails",
}

with tab_notifications:
    ok, msg, notifications = service.load_notifications()
    if not ok:
        st.error("Failed to load notification settings. Showing defaults.")

    with st.form("notification_settings"):
        values = {
            name: st.toggle(label, value=getattr(notifications, name))
            for name, label in NOTIFICATION_LABELS.items()
        }
        submitted = st.form_submit_button("Save Notification Settings", type="primary")

    if submitted:
        ok, msg = service.save_notifications(dataclasses.replace(NotificationSettings(), **values))
        report(ok, msg)

# -------------------------------------------------------------------
# Security
# -------------------------------------------------------------------

with tab_security:
    ok, msg, security = service.load_security()
    if not ok:
        st.error("Failed to load security settings. Showing defaults.")

    with st.form("security_settings"):
        two_factor_auth = st.toggle("Two-factor authentication", value=security.two_factor_auth)
        session_timeout = st.number_input("Session timeout (minutes)", min_value=1, step=5,
                                          value=security.session_timeout)
        password_expiry = st.number_input("Password expiry (days)", min_value=0, step=15,
                                          value=security.password_expiry)
        login_attempts = st.number_input("Max login attempts", min_value=1, step=1,
                                         value=security.login_attempts)
        submitted = st.form_submit_button("Save Security Settings", type="primary")

    if submitted:
        ok, msg = service.save_security(
            SecuritySettings(
                two_factor_auth=two_factor_auth,
                session_timeout=int(session_timeout),
                password_expiry=int(password_expiry),
                login_attempts=int(login_attempts),
            )
        )
        report(ok, msg)

# -------------------------------------------------------------------
# Profile
# -------------------------------------------------------------------

with tab_profile:
    st.markdown(f"**Email:** {principal.email}")
    if principal.display_name:
        st.markdown(f"**Name:** {principal.display_name}")
    st.caption(f"User ID: {principal.user_id}")

    if st.button("Sign out", type="primary"):
        ok, msg = sign_out(principal)
        if ok:
            st.session_state.pop(PRINCIPAL_KEY, None)
            st.rerun()
        else:
            st.error(msg)
