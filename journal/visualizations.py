from __future__ import annotations

import plotly.graph_objects as go

from journal.constants import RATING_MAX, RATING_MIN

TEXT_MAIN = "#2F2A24"
TEXT_SOFT = "#6E655B"
GRID = "rgba(110, 101, 91, 0.15)"
ENERGY_COLOR = "#3772A6"
PRODUCTIVITY_COLOR = "#D95252"
MACRO_COLORS = {
    "protein": "#3772A6",
    "carbs": "#D9C979",
    "fat": "#D95252",
}


def apply_common_plot_style(fig, title):
    fig.update_layout(
        title=title,
        title_font=dict(color=TEXT_MAIN, size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=TEXT_MAIN),
        margin=dict(l=40, r=20, t=40, b=30),
        legend=dict(orientation="h", y=-0.2),
        xaxis=dict(showgrid=False, tickfont=dict(color=TEXT_SOFT), zeroline=False),
        yaxis=dict(showgrid=True, gridcolor=GRID, tickfont=dict(color=TEXT_SOFT), zeroline=False),
    )
    return fig


def rating_trend_chart(df):
    fig = go.Figure()
    if not df.empty:
        fig.add_trace(
            go.Scatter(x=df["date"], y=df["energy"], mode="lines+markers", name="Energy", line=dict(color=ENERGY_COLOR))
        )
        fig.add_trace(
            go.Scatter(
                x=df["date"],
                y=df["productivity"],
                mode="lines+markers",
                name="Productivity",
                line=dict(color=PRODUCTIVITY_COLOR),
            )
        )
    fig.update_yaxes(range=[RATING_MIN - 0.5, RATING_MAX + 0.5], dtick=1)
    return apply_common_plot_style(fig, "Energy & Productivity")


def macro_totals_chart(totals):
    fig = go.Figure()
    if not totals.empty:
        ordered = totals.sort_values("date")
        for key, color in MACRO_COLORS.items():
            fig.add_trace(go.Bar(x=ordered["date"], y=ordered[key], name=key.title(), marker_color=color))
    fig.update_layout(barmode="stack")
    return apply_common_plot_style(fig, "Daily macros (g)")
