import streamlit as st

from journal.assistant import ChatAssistant
from journal.config import gemini_api_key
from journal.state import session_slices


def _get_assistant(ctx):
    def _build():
        assistant = ChatAssistant(entries_provider=ctx.entries.list)
        assistant.set_api_key(gemini_api_key())
        return assistant

    return session_slices.get_or_create("assistant", f"chat::{ctx.owner_id}", _build)


def render_assistant_panel(ctx):
    assistant = _get_assistant(ctx)
    st.markdown("<div class='small-label'>Assistant</div>", unsafe_allow_html=True)

    if assistant.needs_api_key:
        with st.form("assistant.api_key"):
            api_key = st.text_input("Gemini API key", type="password")
            saved = st.form_submit_button("Use key")
        if saved:
            if not assistant.set_api_key(api_key):
                st.error("Please enter an API key")
            else:
                st.rerun()
        st.caption("The assistant needs a Gemini API key.")

    for message in assistant.messages:
        with st.chat_message(message.role):
            st.markdown(message.content)

    prompt = st.chat_input("Ask about your days…", key="assistant.input", disabled=assistant.needs_api_key)
    if prompt:
        with st.spinner("Thinking…"):
            assistant.send(prompt)
        st.rerun()
