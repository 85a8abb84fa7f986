from __future__ import annotations

import logging
import threading

import streamlit as st

from journal.config import oidc_configured
from journal.data.service import UserSession
from journal.errors import ValidationError

logger = logging.getLogger(__name__)


def validate_sign_in(name, email):
    clean_name = " ".join(str(name or "").split())
    clean_email = str(email or "").strip().lower()
    if not clean_name:
        raise ValidationError("Please enter your name", field="name")
    if not clean_email or "@" not in clean_email:
        raise ValidationError("Please enter a valid email address", field="email")
    return clean_name, clean_email


class SessionHolder:
    """Signed-in user of one browser session.

    Readers call ``current()`` at the moment they need the user; it may
    have changed since the view was built.
    """

    def __init__(self):
        self._session = None
        self._lock = threading.Lock()

    def current(self):
        with self._lock:
            return self._session

    def sign_in(self, name, email):
        clean_name, clean_email = validate_sign_in(name, email)
        session = UserSession(user_id=clean_email, name=clean_name)
        with self._lock:
            self._session = session
        logger.info("Signed in %s", clean_email)
        return session

    def sign_out(self):
        with self._lock:
            previous, self._session = self._session, None
        if previous is not None:
            logger.info("Signed out %s", previous.user_id)


def oidc_session():
    if not oidc_configured():
        return None
    try:
        if not st.user.is_logged_in:
            return None
    except Exception:
        return None
    email = str(getattr(st.user, "email", "")).strip().lower()
    if not email:
        return None
    return UserSession(user_id=email, name=str(getattr(st.user, "name", "") or ""))


def get_session_holder():
    if "auth.holder" not in st.session_state:
        st.session_state["auth.holder"] = SessionHolder()
    return st.session_state["auth.holder"]


def sync_oidc_session(holder):
    session = oidc_session()
    if session is None:
        return holder.current()
    current = holder.current()
    if current is None or current.user_id != session.user_id:
        holder.sign_in(session.name or session.user_id.split("@")[0], session.user_id)
    return holder.current()


def render_sign_in(holder):
    st.markdown("<div class='section-title'>Welcome Back</div>", unsafe_allow_html=True)
    st.caption("Enter your details to access your journal")
    if oidc_configured():
        if st.button("Sign in with Google", key="auth.google"):
            st.login("google")
        st.divider()
    with st.form("auth.sign_in"):
        name = st.text_input("Name")
        email = st.text_input("Email")
        submitted = st.form_submit_button("Sign In", use_container_width=True)
    if submitted:
        try:
            holder.sign_in(name, email)
        except ValidationError as exc:
            st.error(exc.message)
            return
        st.success("Successfully signed in!")
        st.rerun()


def sign_out(holder):
    holder.sign_out()
    if oidc_session() is not None:
        st.logout()
