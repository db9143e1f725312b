"""Conversation orchestration.

Each turn sends the whole history to the provider, parses the reply and
appends it. The history itself is an immutable Conversation; the session
only swaps in the extended copy.
"""

import logging
from typing import Optional, Sequence

from .preferences import Preferences
from .providers import AIProvider, ProviderClient, create_client
from .response_parser import parse_response
from .schema import Conversation, Message

logger = logging.getLogger(__name__)


class MissingApiKeyError(Exception):
    """Raised when no API key is stored for the selected provider."""


def send_chat_message(messages: Sequence[Message], client: ProviderClient) -> Message:
    """Send ``messages`` and return the parsed assistant reply.

    Provider failures propagate as ProviderError; a reply that arrives is
    always turned into a Message, however malformed.
    """
    raw = client.complete([m.to_api() for m in messages])
    return Message.assistant(parse_response(raw))


class ChatSession:
    """Stateful wrapper around send_chat_message for interactive use."""

    def __init__(
        self,
        client: ProviderClient,
        conversation: Optional[Conversation] = None,
    ):
        self.client = client
        self.conversation = conversation or Conversation()

    @classmethod
    def from_preferences(
        cls,
        preferences: Preferences,
        provider: AIProvider,
        model: Optional[str] = None,
    ) -> "ChatSession":
        """Build a session from the stored key and model for ``provider``."""
        api_key = preferences.get_api_key(provider)
        if not api_key:
            raise MissingApiKeyError(
                f"No API key stored for {provider.value}. Save one with 'stack-advisor key set'."
            )
        model = model or preferences.get_selected_model(provider)
        return cls(create_client(provider, api_key, model=model))

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.conversation.messages

    def send(self, text: str) -> Message:
        """Send one user message and return the assistant reply.

        The user message stays in the history even when the provider fails,
        so the caller can retry.
        """
        self.conversation = self.conversation.append(Message.user(text))
        reply = send_chat_message(self.conversation.messages, self.client)
        self.conversation = self.conversation.append(reply)
        logger.debug(
            "Turn complete: %d messages, %d suggestions, recommendations=%s",
            len(self.conversation.messages),
            len(reply.suggestions),
            reply.recommendations is not None,
        )
        return reply

    def reset(self) -> None:
        self.conversation = Conversation()
