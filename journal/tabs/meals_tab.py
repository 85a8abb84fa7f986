from datetime import date

import streamlit as st

from journal.constants import MEAL_TYPE_LABELS, MEAL_TYPES
from journal.forms.meal_form import MealForm
from journal.metrics import meals_by_date
from journal.state import session_slices
from journal.tabs.widgets import follow_selection, render_delete_controls, render_notices, widget_key


def _get_form(ctx):
    return session_slices.get_or_create(
        "meals",
        f"form::{ctx.owner_id}",
        lambda: MealForm(ctx.adapter, store=ctx.meals, on_save=lambda: ctx.refresh(ctx.meals.kind)),
    )


def _render_form(form):
    key = widget_key("meals.form", form)
    st.markdown(
        f"<div class='small-label'>{'Add Meal' if form.is_new else 'Edit Meal'}</div>",
        unsafe_allow_html=True,
    )
    with st.form(key):
        name = st.text_input("Meal name", value=form.draft["name"])
        type_col, day_col = st.columns(2)
        with type_col:
            meal_type = st.selectbox(
                "Type",
                MEAL_TYPES,
                index=MEAL_TYPES.index(form.draft["type"]) if form.draft["type"] in MEAL_TYPES else 0,
                format_func=MEAL_TYPE_LABELS.get,
            )
        with day_col:
            meal_day = st.date_input("Date", value=date.fromisoformat(form.draft["date"]))
        cols = st.columns(4)
        amounts = {}
        for col, (field_name, label) in zip(
            cols, (("calories", "Calories"), ("protein", "Protein (g)"), ("carbs", "Carbs (g)"), ("fat", "Fat (g)"))
        ):
            with col:
                amounts[field_name] = st.number_input(label, value=float(form.draft[field_name] or 0), step=1.0)
        notes = st.text_area("Notes", value=form.draft["notes"], height=80)
        submitted = st.form_submit_button(
            "Add meal" if form.is_new else "Update meal",
            disabled=not form.can_edit(),
            use_container_width=True,
        )
    if submitted:
        form.update_fields(
            {"name": name, "type": meal_type, "date": meal_day.isoformat(), "notes": notes, **amounts}
        )
        form.submit()
        st.rerun()


def _render_meal_list(ctx, form):
    grouped = meals_by_date(ctx.meals.list())
    if not grouped:
        st.caption("No meals logged yet.")
        return
    for day, meals in grouped.items():
        calories = sum(meal.calories for meal in meals)
        st.markdown(f"<div class='small-label'>{day} · {calories:.0f} kcal</div>", unsafe_allow_html=True)
        for meal in meals:
            label = f"{MEAL_TYPE_LABELS.get(meal.type, meal.type)}: {meal.name}"
            selected = meal.id == ctx.meals.active_id
            if st.button(label, key=f"meals.pick.{meal.id}", type="primary" if selected else "secondary", use_container_width=True):
                ctx.meals.set_active(meal.id)
                st.rerun()


def render_meals_tab(ctx):
    form = _get_form(ctx)
    follow_selection(form, ctx.meals)

    st.markdown("<div class='section-title'>Meals</div>", unsafe_allow_html=True)
    render_notices(form)
    list_col, form_col = st.columns([1, 2])
    with list_col:
        if st.button("＋ New meal", key="meals.new", use_container_width=True):
            ctx.meals.selection.clear()
            form.reset()
            st.rerun()
        _render_meal_list(ctx, form)
    with form_col:
        _render_form(form)
        render_delete_controls(form, "meals", label="Delete meal")
