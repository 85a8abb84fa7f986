from datetime import date

import streamlit as st

from journal.metrics import rating_summary
from journal.theme import toggle_theme


def render_global_header(ctx, session, on_sign_out):
    today_iso = date.today().isoformat()
    entries = ctx.entries.list()
    summary = rating_summary(entries)
    logged_today = any(entry.date == today_iso for entry in entries)

    title_col, theme_col, user_col = st.columns([6, 1, 2])
    with title_col:
        st.markdown(f"<div class='small-label'>Today • {today_iso}</div>", unsafe_allow_html=True)
        st.markdown(f"### Hello, {session.display_name}")
    with theme_col:
        st.button("◐", key="header.theme", help="Switch theme", on_click=toggle_theme)
    with user_col:
        st.caption(session.user_id)
        if st.button("Sign out", key="header.sign_out"):
            on_sign_out()
            st.rerun()

    if summary["entries"]:
        caption = f"{summary['entries']} entries • avg energy {summary['energy']} • avg productivity {summary['productivity']}"
        if not logged_today:
            caption += " • nothing written today yet"
        st.caption(caption)

    errors = ctx.errors()
    if errors:
        st.warning("Some data could not be refreshed; showing the last known copy.")
    if not ctx.remote:
        st.caption("Offline mode: data is stored on this device.")
