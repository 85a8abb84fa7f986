import streamlit as st

from journal.metrics import daily_nutrition_totals, entries_frame, rating_summary
from journal.visualizations import macro_totals_chart, rating_trend_chart


def render_insights_tab(ctx):
    entries = ctx.entries.list()
    meals = ctx.meals.list()

    st.markdown("<div class='section-title'>Insights</div>", unsafe_allow_html=True)
    if not entries and not meals:
        st.info("No journal entries or meals yet.")
        return

    summary = rating_summary(entries)
    summary_cols = st.columns(3)
    summary_cols[0].metric("Journal entries", summary["entries"])
    summary_cols[1].metric("Avg energy", summary["energy"] if summary["energy"] is not None else "-")
    summary_cols[2].metric("Avg productivity", summary["productivity"] if summary["productivity"] is not None else "-")

    if entries:
        st.plotly_chart(rating_trend_chart(entries_frame(entries)), use_container_width=True)

    totals = daily_nutrition_totals(meals)
    if totals.empty:
        st.caption("No meals logged yet.")
        return
    st.plotly_chart(macro_totals_chart(totals), use_container_width=True)
    st.markdown("<div class='small-label'>Daily totals</div>", unsafe_allow_html=True)
    st.dataframe(totals.head(14), hide_index=True, use_container_width=True)
