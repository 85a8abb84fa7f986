import streamlit as st

THEME_PRESETS = {
    "dark": {
        "bg_main": "#121017",
        "bg_glow": "#1f1a2a",
        "bg_card": "#1e1a27",
        "border": "#5b4f70",
        "text_main": "#f3edf9",
        "text_soft": "#c8bbd8",
        "button": "#5f4f79",
        "button_hover": "#725f90",
    },
    "light": {
        "bg_main": "#f7f3ed",
        "bg_glow": "#eee2d3",
        "bg_card": "#fff9f1",
        "border": "#c4b59f",
        "text_main": "#1b1b1b",
        "text_soft": "#5d5d5d",
        "button": "#b29a7d",
        "button_hover": "#9f876b",
    },
}


def ensure_theme_state():
    if st.session_state.get("ui_theme") not in THEME_PRESETS:
        st.session_state["ui_theme"] = "light"
    return st.session_state["ui_theme"]


def toggle_theme():
    current = ensure_theme_state()
    st.session_state["ui_theme"] = "dark" if current == "light" else "light"


def inject_theme_css():
    name = ensure_theme_state()
    theme = THEME_PRESETS[name]
    theme_vars = "\n".join(f"    --{key.replace('_', '-')}: {value};" for key, value in theme.items())
    st.markdown(
        "<style>\n"
        "@import url('https://fonts.googleapis.com/css2?family=Crimson+Text:wght@400;600&family=IBM+Plex+Sans:wght@300;400;500&display=swap');\n"
        f":root {{\n{theme_vars}\n}}\n"
        """
html, body, [class*="css"] {
    font-family: 'IBM Plex Sans', sans-serif;
    color: var(--text-main);
}

h1, h2, h3, .page-title {
    font-family: 'Crimson Text', serif;
    letter-spacing: 0.4px;
}

.stApp {
    background: radial-gradient(1400px 900px at 20% 0%, var(--bg-glow) 0%, var(--bg-main) 58%);
    color: var(--text-main);
}

.section-title {
    font-size: 14px;
    font-weight: 600;
    margin: 0 0 8px 0;
}

.small-label {
    color: var(--text-soft);
    font-size: 12px;
    letter-spacing: 0.2px;
}

.stMetric {
    background: var(--bg-card);
    padding: 10px 12px;
    border-radius: 12px;
    border: 1px solid var(--border);
}
</style>
""",
        unsafe_allow_html=True,
    )
    return theme
