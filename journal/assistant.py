"""Chat assistant panel state.

The language model is an opaque ``responder(prompt) -> text`` callable; the
default one talks to Gemini through ``google-genai``. Journal entries are
passed in as plain text blocks so the model can answer questions about the
user's recent days.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
from uuid import uuid4

from google import genai
from google.genai import types

from journal.constants import ASSISTANT_ENTRY_LIMIT, DEFAULT_ASSISTANT_CONTEXT

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"
FALLBACK_REPLY = "I couldn't process your request. Please try again."


@dataclass
class ChatMessage:
    role: str
    content: str
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)


def format_entries_context(entries, limit=ASSISTANT_ENTRY_LIMIT):
    blocks = []
    for entry in sorted(entries or [], key=lambda item: item.date or "", reverse=True)[:limit]:
        blocks.append(
            "\n".join(
                [
                    f"Date: {entry.date}",
                    f"Energy: {entry.energy}/10",
                    f"Productivity: {entry.productivity}/10",
                    f"Entry: {entry.content.strip()}",
                ]
            )
        )
    return "\n\n".join(blocks)


def build_prompt(context, message, entries=None, limit=ASSISTANT_ENTRY_LIMIT):
    parts = [f"You are a helpful assistant focused on {context}."]
    journal_text = format_entries_context(entries, limit=limit)
    if journal_text:
        parts.append("Here are the user's most recent journal entries:\n\n" + journal_text)
    parts.append(f"Respond to the following message: {message}")
    return "\n\n".join(parts)


class GeminiResponder:
    def __init__(self, api_key, model_name=DEFAULT_MODEL, temperature=0.7, max_output_tokens=800, client=None):
        self.api_key = api_key
        self.model_name = model_name
        self.client = client or genai.Client(api_key=api_key)
        self.config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

    def __call__(self, prompt):
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=self.config,
        )
        return (getattr(response, "text", None) or "").strip()


class ChatAssistant:
    def __init__(
        self,
        responder: Optional[Callable[[str], str]] = None,
        context: str = DEFAULT_ASSISTANT_CONTEXT,
        entries_provider: Optional[Callable[[], list]] = None,
        responder_factory: Optional[Callable[[str], Callable[[str], str]]] = None,
    ):
        self.context = context
        self.responder = responder
        self.entries_provider = entries_provider
        self.responder_factory = responder_factory or GeminiResponder
        self.needs_api_key = responder is None
        self.is_typing = False
        self.messages: List[ChatMessage] = [
            ChatMessage(
                role="assistant",
                content=f"Hello! I'm your personal assistant for {context}. How can I help you today?",
            )
        ]

    def set_api_key(self, api_key):
        clean = str(api_key or "").strip()
        if not clean:
            return False
        self.responder = self.responder_factory(clean)
        self.needs_api_key = False
        return True

    def clear_api_key(self):
        self.responder = None
        self.needs_api_key = True

    def _recent_entries(self):
        if self.entries_provider is None:
            return []
        try:
            return list(self.entries_provider() or [])
        except Exception as exc:
            logger.warning("Journal context unavailable for assistant: %s", exc)
            return []

    def send(self, text):
        message = str(text or "").strip()
        if not message:
            return None
        if self.responder is None:
            self.needs_api_key = True
            return None

        self.messages.append(ChatMessage(role="user", content=message))
        prompt = build_prompt(self.context, message, self._recent_entries())
        self.is_typing = True
        try:
            reply = self.responder(prompt) or FALLBACK_REPLY
        except Exception as exc:
            logger.warning("Assistant call failed: %s", exc)
            reply = str(exc) or "Something went wrong. Please try again later."
            if "api key" in reply.lower():
                self.clear_api_key()
        finally:
            self.is_typing = False
        answer = ChatMessage(role="assistant", content=reply)
        self.messages.append(answer)
        return answer
