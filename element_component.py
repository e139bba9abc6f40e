import logging
from typing import Callable, List, Optional, Tuple

import streamlit as st

from config import load_config
from google_client import get_drive_service
from services.auth_service import Principal, sign_in, sign_out
from services.drive_service import upload_image

PRINCIPAL_KEY = "principal"
FLASH_KEY = "flash_messages"


def configure_logging() -> None:
    if st.session_state.get("_logging_configured"):
        return
    logging.basicConfig(
        level=load_config().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    st.session_state["_logging_configured"] = True


# -------------------------------------------------------------------
# Notifications
# -------------------------------------------------------------------

def flash(ok: bool, message: str) -> None:
    """Queue a message to show after the next rerun."""
    st.session_state.setdefault(FLASH_KEY, []).append((ok, message))


def show_flashes() -> None:
    messages: List[Tuple[bool, str]] = st.session_state.pop(FLASH_KEY, [])
    for ok, message in messages:
        if ok:
            st.toast(message, icon="✅")
        else:
            st.error(message)


def report(ok: bool, message: str) -> None:
    flash(ok, message)
    st.rerun()


# -------------------------------------------------------------------
# Auth gate
# -------------------------------------------------------------------

def _login_form() -> None:
    st.title("🔐 Admin Login")
    with st.form("login_form", enter_to_submit=True):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        ok, msg, principal = sign_in(email, password)
        if ok:
            st.session_state[PRINCIPAL_KEY] = principal
            st.rerun()
        else:
            st.error(msg)


def require_login() -> Principal:
    """
    Stop the page unless an admin is signed in in this browser session.
    Every page calls this before touching any data.
    """
    configure_logging()
    principal: Optional[Principal] = st.session_state.get(PRINCIPAL_KEY)
    if principal is None:
        _login_form()
        st.stop()

    with st.sidebar:
        st.caption(f"Signed in as **{principal.email}**")
        if st.button("Logout", key="logout_button"):
            ok, msg = sign_out(principal)
            if ok:
                st.session_state.pop(PRINCIPAL_KEY, None)
                st.rerun()
            else:
                st.error(msg)

    show_flashes()
    return principal


# -------------------------------------------------------------------
# Dialogs
# -------------------------------------------------------------------

@st.dialog("Confirm")
def confirmation_dialog(prompt: str, action: Callable[[], Tuple[bool, str]], confirm_label: str = "Delete"):
    st.write(prompt)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button(confirm_label, type="primary", key="confirm_yes"):
            ok, msg = action()
            report(ok, msg)
    with col_no:
        if st.button("Cancel", key="confirm_no"):
            st.rerun()


def image_uploader(label: str, key: str, multiple: bool = False) -> List[str]:
    """
    File picker that pushes the chosen images to Drive and returns their
    hosted URLs. Failed uploads are reported and skipped.
    """
    files = st.file_uploader(
        label,
        type=["jpg", "jpeg", "png", "webp"],
        accept_multiple_files=multiple,
        key=key,
    )
    if not files:
        return []
    if not multiple:
        files = [files]

    cache = st.session_state.setdefault(f"{key}_urls", {})
    urls = []
    drive = None
    for f in files:
        cache_key = (f.name, f.size)
        if cache_key not in cache:
            if drive is None:
                drive = get_drive_service()
            with st.spinner(f"Uploading {f.name}..."):
                ok, msg, url = upload_image(drive, f.getvalue(), f.name)
            if not ok:
                st.error(msg)
                continue
            cache[cache_key] = url
        urls.append(cache[cache_key])
    return urls
