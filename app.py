import logging

import streamlit as st

from journal.auth import get_session_holder, render_sign_in, sign_out, sync_oidc_session
from journal.context import build_context, create_cache, create_data_service
from journal.header import render_global_header
from journal.logging_config import configure_logging
from journal.router import render_router
from journal.state import session_slices
from journal.theme import inject_theme_css

configure_logging()
logger = logging.getLogger("journal.app")

st.set_page_config(page_title="Daily Journal", layout="wide")
inject_theme_css()


@st.cache_resource
def get_cache():
    return create_cache()


def get_service(holder):
    return session_slices.get_or_create(
        "app",
        "service",
        lambda: create_data_service(holder.current, cache=get_cache()),
    )


def get_context(holder, owner_id):
    current = session_slices.get_value("app", "context")
    if current is not None and current.owner_id == owner_id:
        return current
    if current is not None:
        logger.info("Switching context from %s to %s", current.owner_id, owner_id)
        current.unmount()
    ctx = build_context(get_service(holder), owner_id, cache=get_cache())
    ctx.mount()
    session_slices.set_value("app", "context", ctx)
    return ctx


def handle_sign_out(holder):
    ctx = session_slices.pop_value("app", "context")
    if ctx is not None:
        ctx.unmount()
    for name in ("journal", "meals", "planner", "assistant"):
        session_slices.clear_slice(name)
    sign_out(holder)


holder = get_session_holder()
session = sync_oidc_session(holder)
if session is None:
    render_sign_in(holder)
    st.stop()

context = get_context(holder, session.user_id)
render_global_header(context, session, on_sign_out=lambda: handle_sign_out(holder))
render_router(context)
