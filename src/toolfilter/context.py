"""Context string assembly for embedding.

Turns raw text or a chat history into one bounded string. Token counts use the
rough approximation of 4 characters per token.
"""

from __future__ import annotations

from typing import Any, Sequence, Union

from .models import ChatMessage

_CHARS_PER_TOKEN = 4
# A word boundary is used only if it keeps at least this share of the budget
_WORD_BOUNDARY_RATIO = 0.8
_TRUNCATION_MARKER = "..."


def truncate_to_tokens(text: str, max_tokens: int) -> str:
    """Truncate text to an approximate token budget, preferring a word boundary."""
    max_chars = max(0, max_tokens) * _CHARS_PER_TOKEN
    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    last_space = truncated.rfind(" ")
    if last_space > max_chars * _WORD_BOUNDARY_RATIO:
        truncated = truncated[:last_space]

    return truncated + _TRUNCATION_MARKER


def _as_message(message: Union[ChatMessage, dict[str, Any]]) -> ChatMessage:
    if isinstance(message, ChatMessage):
        return message
    return ChatMessage.model_validate(message)


def build_context_string(
    input: Union[str, Sequence[Union[ChatMessage, dict[str, Any]]]],
    max_messages: int = 3,
    max_tokens: int = 500,
) -> str:
    """Build the string that gets embedded for a filter request.

    System messages are dropped, the last ``max_messages`` remaining messages
    are rendered as ``"<Role>: <content>"`` and joined by blank lines.
    """
    if isinstance(input, str):
        return truncate_to_tokens(input, max_tokens)

    messages = [m for m in map(_as_message, input) if m.role != "system"]
    recent = messages[-max_messages:] if max_messages > 0 else []

    context = "\n\n".join(f"{m.role.capitalize()}: {m.content}" for m in recent)
    return truncate_to_tokens(context, max_tokens)
