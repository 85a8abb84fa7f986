import streamlit as st

from journal.forms.base import FormState


def render_notices(form):
    for notice in form.drain_notices():
        if notice.level == "success":
            st.success(notice.message)
        elif notice.level == "warning":
            st.warning(notice.message)
        else:
            st.error(notice.message)


def widget_key(prefix, form):
    # New key whenever the draft is replaced so widgets re-read it.
    return f"{prefix}.{form.entity_id or 'new'}.{len(form.history)}"


def follow_selection(form, store):
    active_id = store.active_id
    if active_id == form.entity_id:
        return
    if active_id:
        if not form.load(active_id) and form.is_new:
            store.selection.clear_if(active_id)
    elif not form.is_new:
        form.reset()


def render_delete_controls(form, key_prefix, label="Delete"):
    if form.is_new:
        return
    if not form.confirming_delete:
        if st.button(label, key=f"{key_prefix}.delete", disabled=form.state != FormState.EDITING):
            form.request_delete()
            st.rerun()
        return
    st.warning("Are you sure? This cannot be undone.")
    confirm_col, cancel_col = st.columns(2)
    with confirm_col:
        if st.button("Yes, delete", key=f"{key_prefix}.confirm", type="primary"):
            form.confirm_delete()
            st.rerun()
    with cancel_col:
        if st.button("Cancel", key=f"{key_prefix}.cancel"):
            form.cancel_delete()
            st.rerun()


def snippet(text, limit=60):
    clean = " ".join(str(text or "").split())
    return clean if len(clean) <= limit else clean[: limit - 1] + "…"
