import os

import streamlit as st

CACHE_PATH = os.path.join(os.path.dirname(__file__), "..", "journal_cache.db")

ENV_FALLBACK_KEYS = {
    ("auth", "redirect_uri"): "AUTH_REDIRECT_URI",
    ("auth", "cookie_secret"): "AUTH_COOKIE_SECRET",
    ("auth", "google", "client_id"): "GOOGLE_CLIENT_ID",
    ("auth", "google", "client_secret"): "GOOGLE_CLIENT_SECRET",
    ("auth", "google", "server_metadata_url"): "GOOGLE_SERVER_METADATA_URL",
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "BACKEND_SESSION_SECRET"): "BACKEND_SESSION_SECRET",
    ("app", "GEMINI_API_KEY"): "GEMINI_API_KEY",
    ("app", "CHANGE_POLL_SECONDS"): "CHANGE_POLL_SECONDS",
    ("cache", "url"): "JOURNAL_CACHE_URL",
}


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    current = st.secrets
    for key in path:
        try:
            if key not in current:
                return default
            current = current[key]
        except Exception:
            return default
    return current


def api_base_url():
    return str(get_secret(("app", "API_BASE_URL")) or "").strip()


def backend_token():
    return str(get_secret(("app", "BACKEND_SESSION_SECRET")) or "").strip()


def remote_enabled():
    return bool(api_base_url() and backend_token())


def gemini_api_key():
    return str(get_secret(("app", "GEMINI_API_KEY")) or "").strip()


def change_poll_seconds(default=5.0):
    raw = get_secret(("app", "CHANGE_POLL_SECONDS"))
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def cache_database_url():
    raw_value = str(get_secret(("cache", "url")) or "").strip()
    if raw_value and raw_value.lower() not in {"none", "null"}:
        return raw_value
    return f"sqlite:///{os.path.abspath(CACHE_PATH)}"


def oidc_configured():
    return bool(
        get_secret(("auth", "redirect_uri"))
        and get_secret(("auth", "cookie_secret"))
        and get_secret(("auth", "google", "client_id"))
        and get_secret(("auth", "google", "client_secret"))
    )
