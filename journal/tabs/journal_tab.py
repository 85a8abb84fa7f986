from datetime import date

import streamlit as st

from journal.constants import RATING_MAX, RATING_MIN
from journal.forms.journal_form import JournalForm
from journal.state import session_slices
from journal.tabs.widgets import follow_selection, render_delete_controls, render_notices, snippet, widget_key


def _get_form(ctx):
    return session_slices.get_or_create(
        "journal",
        f"form::{ctx.owner_id}",
        lambda: JournalForm(ctx.adapter, store=ctx.entries, on_save=lambda: ctx.refresh(ctx.entries.kind)),
    )


def _render_entry_list(ctx, form):
    if st.button("＋ New entry", key="journal.new", use_container_width=True):
        ctx.entries.selection.clear()
        form.reset()
        st.rerun()
    entries = ctx.entries.list()
    if not entries:
        st.caption("No journal entries yet. Write your first one!")
        return
    for entry in entries:
        label = f"{entry.date} · {snippet(entry.content, 40)}"
        selected = entry.id == ctx.entries.active_id
        if st.button(label, key=f"journal.pick.{entry.id}", type="primary" if selected else "secondary", use_container_width=True):
            ctx.entries.set_active(entry.id)
            st.rerun()


def _render_form(form):
    key = widget_key("journal.form", form)
    title = "New Journal Entry" if form.is_new else "Edit Journal Entry"
    st.markdown(f"<div class='small-label'>{title}</div>", unsafe_allow_html=True)
    with st.form(key):
        entry_day = st.date_input("Date", value=date.fromisoformat(form.draft["date"]))
        content = st.text_area("How was your day?", value=form.draft["content"], height=200)
        energy_col, productivity_col = st.columns(2)
        with energy_col:
            energy = st.slider("Energy", RATING_MIN, RATING_MAX, int(form.draft["energy"]))
        with productivity_col:
            productivity = st.slider("Productivity", RATING_MIN, RATING_MAX, int(form.draft["productivity"]))
        submitted = st.form_submit_button(
            "Save entry" if form.is_new else "Update entry",
            disabled=not form.can_edit(),
            use_container_width=True,
        )
    if submitted:
        form.update_fields(
            {
                "date": entry_day.isoformat(),
                "content": content,
                "energy": energy,
                "productivity": productivity,
            }
        )
        form.submit()
        st.rerun()


def render_journal_tab(ctx):
    form = _get_form(ctx)
    follow_selection(form, ctx.entries)

    st.markdown("<div class='section-title'>Journal</div>", unsafe_allow_html=True)
    render_notices(form)
    list_col, form_col = st.columns([1, 2])
    with list_col:
        _render_entry_list(ctx, form)
    with form_col:
        _render_form(form)
        render_delete_controls(form, "journal", label="Delete entry")
