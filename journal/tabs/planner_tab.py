from datetime import date

import streamlit as st

from journal.constants import MEAL_TYPE_LABELS, MEAL_TYPES
from journal.forms.base import FormState
from journal.forms.weekly_plan_form import WeeklyPlanForm
from journal.state import session_slices
from journal.tabs.widgets import render_delete_controls, render_notices, widget_key


def _get_form(ctx):
    return session_slices.get_or_create(
        "planner",
        f"form::{ctx.owner_id}",
        lambda: WeeklyPlanForm(
            ctx.adapter,
            store=ctx.plans,
            meal_store=ctx.meals,
            on_save=lambda: ctx.refresh(ctx.plans.kind),
        ),
    )


def _on_assign(form, day, meal_type, key):
    form.assign(day, meal_type, st.session_state.get(key) or None)


def _on_notes(form, day, key):
    form.set_notes(day, st.session_state.get(key, ""))


def _meal_options(ctx, meal_type):
    meals = [meal for meal in ctx.meals.list() if meal.type == meal_type]
    return [""] + [meal.id for meal in meals]


def _render_week_nav(form):
    prev_col, label_col, today_col, next_col = st.columns([1, 3, 1, 1])
    with prev_col:
        if st.button("◀", key="planner.prev"):
            form.previous_week()
            st.rerun()
    with label_col:
        days = form.days
        st.markdown(f"<div class='small-label'>Week of {days[0]} – {days[-1]}</div>", unsafe_allow_html=True)
    with today_col:
        if st.button("Today", key="planner.today"):
            form.current_week()
            st.rerun()
    with next_col:
        if st.button("▶", key="planner.next"):
            form.next_week()
            st.rerun()


def _render_day(ctx, form, day, base_key):
    weekday = date.fromisoformat(day).strftime("%A")
    st.markdown(f"**{weekday}** · {day}")
    cols = st.columns(len(MEAL_TYPES))
    names = {meal.id: meal.name for meal in ctx.meals.list()}
    for col, meal_type in zip(cols, MEAL_TYPES):
        options = _meal_options(ctx, meal_type)
        current = form.meal_id_for(day, meal_type) or ""
        key = f"{base_key}.{day}.{meal_type}"
        with col:
            st.selectbox(
                MEAL_TYPE_LABELS[meal_type],
                options,
                index=options.index(current) if current in options else 0,
                format_func=lambda meal_id: names.get(meal_id, "—") if meal_id else "—",
                key=key,
                on_change=_on_assign,
                args=(form, day, meal_type, key),
                disabled=not form.can_edit(),
            )
    notes_key = f"{base_key}.{day}.notes"
    st.text_input(
        "Notes",
        value=(form.draft["days"].get(day) or {}).get("notes", ""),
        key=notes_key,
        on_change=_on_notes,
        args=(form, day, notes_key),
        label_visibility="collapsed",
        placeholder="Notes for the day",
    )


def render_planner_tab(ctx):
    form = _get_form(ctx)
    # An untouched draft picks up a plan for this week that arrived after the last render.
    if form.state == FormState.IDLE:
        form.open_week(form.week_start)
    meals_feed = ctx.feed(ctx.meals.kind)
    if meals_feed is None or meals_feed.last_error is None:
        form.prune_missing_meals(ctx.meals.ids())

    st.markdown("<div class='section-title'>Weekly Meal Plan</div>", unsafe_allow_html=True)
    render_notices(form)
    _render_week_nav(form)
    if not len(ctx.meals):
        st.caption("Add some meals first to plan your week.")

    base_key = widget_key("planner.form", form)
    for day in form.days:
        _render_day(ctx, form, day, base_key)

    save_col, delete_col = st.columns(2)
    with save_col:
        if st.button("Save plan", key="planner.save", type="primary", disabled=not form.can_edit(), use_container_width=True):
            form.submit()
            st.rerun()
    with delete_col:
        render_delete_controls(form, "planner", label="Clear plan")
