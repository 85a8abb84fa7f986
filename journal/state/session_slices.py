import streamlit as st


PREFIX = "slice"


def _key(slice_name):
    return f"{PREFIX}.{slice_name}"


def get_slice(slice_name):
    key = _key(slice_name)
    if key not in st.session_state:
        st.session_state[key] = {}
    return st.session_state[key]


def get_value(slice_name, name, default=None):
    return get_slice(slice_name).get(name, default)


def set_value(slice_name, name, value):
    get_slice(slice_name)[name] = value


def get_or_create(slice_name, name, factory):
    """Return the object stored under ``name``, building it once per browser session."""
    payload = get_slice(slice_name)
    if name not in payload:
        payload[name] = factory()
    return payload[name]


def pop_value(slice_name, name, default=None):
    return get_slice(slice_name).pop(name, default)


def clear_slice(slice_name):
    key = _key(slice_name)
    if key in st.session_state:
        del st.session_state[key]
