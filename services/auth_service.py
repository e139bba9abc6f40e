# services/auth_service.py

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

import data_integrator

logger = logging.getLogger(__name__)


@dataclass
class Principal:
    user_id: str
    email: str
    display_name: str = ""
    access_token: str = field(default="", repr=False, compare=False)
    refresh_token: str = field(default="", repr=False, compare=False)


def _principal_from_user(user, session=None) -> Optional[Principal]:
    if user is None:
        return None
    metadata = getattr(user, "user_metadata", None) or {}
    return Principal(
        user_id=str(user.id),
        email=user.email or "",
        display_name=metadata.get("display_name") or metadata.get("full_name") or "",
        access_token=getattr(session, "access_token", "") or "",
        refresh_token=getattr(session, "refresh_token", "") or "",
    )


def sign_in(email: str, password: str) -> Tuple[bool, str, Optional[Principal]]:
    """
    Password sign-in against Supabase Auth on a client owned by the caller's
    browser session. The returned principal carries that session's tokens
    and is the only record of the sign-in; keep it in st.session_state.
    Returns (ok, message, principal)
    """
    if not email or not password:
        return False, "Email and password are required", None
    try:
        client = data_integrator.new_auth_client()
        resp = client.auth.sign_in_with_password({"email": email.strip(), "password": password})
        principal = _principal_from_user(resp.user, getattr(resp, "session", None))
        if principal is None:
            return False, "Invalid email or password", None
        logger.info("Signed in %s", principal.email)
        return True, "Signed in", principal
    except Exception as e:
        logger.warning("Sign-in failed for %s: %s", email, e)
        return False, "Invalid email or password", None


def sign_out(principal: Principal) -> Tuple[bool, str]:
    """Revoke this principal's session only."""
    if not principal.access_token:
        return True, "Signed out"
    try:
        client = data_integrator.new_auth_client()
        client.auth.set_session(principal.access_token, principal.refresh_token)
        client.auth.sign_out()
        logger.info("Signed out %s", principal.email)
        return True, "Signed out"
    except Exception as e:
        logger.error("Sign-out failed for %s: %s", principal.email, e)
        return False, "Failed to logout"
