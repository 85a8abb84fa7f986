import streamlit as st

from journal.config import change_poll_seconds
from journal.tabs.assistant_panel import render_assistant_panel
from journal.tabs.insights_tab import render_insights_tab
from journal.tabs.journal_tab import render_journal_tab
from journal.tabs.meals_tab import render_meals_tab
from journal.tabs.planner_tab import render_planner_tab


TAB_OPTIONS = [
    "Journal",
    "Meals",
    "Meal Planner",
    "Insights",
]


def render_router(ctx):
    with st.sidebar:
        _render_assistant(ctx)

    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == "Meals":
        return _render_meals(ctx)

    if active == "Meal Planner":
        return _render_planner(ctx)

    if active == "Insights":
        return _render_insights(ctx)

    return _render_journal(ctx)


# Remote change notifications only mark stores stale; these fragments rerun
# on a timer and pull the fresh rows.
@st.fragment(run_every=change_poll_seconds())
def _render_journal(ctx):
    ctx.refresh_stale()
    render_journal_tab(ctx)


@st.fragment(run_every=change_poll_seconds())
def _render_meals(ctx):
    ctx.refresh_stale()
    render_meals_tab(ctx)


@st.fragment(run_every=change_poll_seconds())
def _render_planner(ctx):
    ctx.refresh_stale()
    render_planner_tab(ctx)


@st.fragment
def _render_insights(ctx):
    render_insights_tab(ctx)


@st.fragment
def _render_assistant(ctx):
    render_assistant_panel(ctx)
