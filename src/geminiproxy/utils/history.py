"""Map OpenAI chat messages onto Gemini chat turns."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Sequence, Tuple

from .content import ContentNormalizer, ContentPart, TextPart

SYSTEM_PREFIX = "[SYSTEM]: "


@dataclass(frozen=True)
class Turn:
    role: str
    parts: List[ContentPart] = field(default_factory=list)


def map_role(role: str) -> str:
    # Gemini only knows "user" and "model"; system text rides on a user turn.
    return "model" if role == "assistant" else "user"


def translate_message(message: Mapping[str, Any], normalizer: ContentNormalizer) -> Turn:
    role = message.get("role")
    content = message.get("content")
    if role == "system":
        return Turn(role="user", parts=[TextPart(f"{SYSTEM_PREFIX}{content}")])
    return Turn(role=map_role(role), parts=normalizer.normalize(content))


def translate_history(messages: Sequence[Mapping[str, Any]], normalizer: ContentNormalizer) -> List[Turn]:
    """Translate every message except the last one, preserving order."""
    return [translate_message(message, normalizer) for message in messages[:-1]]


def split_conversation(
    messages: Sequence[Mapping[str, Any]], normalizer: ContentNormalizer
) -> Tuple[List[Turn], List[ContentPart]]:
    """Return (history turns, parts of the final message)."""
    history = translate_history(messages, normalizer)
    current = normalizer.normalize(messages[-1].get("content"))
    return history, current
