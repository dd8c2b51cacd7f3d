"""Gemini client helpers built on google-genai."""
from typing import Any, Iterable, Iterator, List, Optional

from google import genai
from google.genai import types

from ..utils.content import ContentPart, InlineImagePart, TextPart
from ..utils.history import Turn

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_CIVIC_INTEGRITY,
)


def create_client(api_key: str, timeout: Optional[float] = None) -> genai.Client:
    """Create a Gemini client bound to one API key."""
    if timeout:
        return genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=int(timeout * 1000)))
    return genai.Client(api_key=api_key)


def build_safety_settings() -> List[types.SafetySetting]:
    return [
        types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
        for category in SAFETY_CATEGORIES
    ]


def build_generation_config(
    temperature: float,
    top_p: float,
    top_k: int,
    max_output_tokens: int,
) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=temperature,
        top_p=top_p,
        top_k=top_k,
        max_output_tokens=max_output_tokens,
        response_mime_type="text/plain",
        safety_settings=build_safety_settings(),
    )


def to_genai_part(part: ContentPart) -> types.Part:
    if isinstance(part, InlineImagePart):
        return types.Part.from_bytes(data=part.to_bytes(), mime_type=part.mime_type)
    if isinstance(part, TextPart):
        return types.Part(text=part.text)
    raise TypeError(f"Unknown content part: {part!r}")


def to_genai_parts(parts: Iterable[ContentPart]) -> List[types.Part]:
    return [to_genai_part(part) for part in parts]


def to_genai_history(turns: Iterable[Turn]) -> List[types.Content]:
    return [types.Content(role=turn.role, parts=to_genai_parts(turn.parts)) for turn in turns]


def send_chat_message(
    client: Any,
    model: str,
    history: List[Turn],
    parts: List[ContentPart],
    config: types.GenerateContentConfig,
) -> str:
    """Start a chat seeded with history, send one message and return the reply text."""
    chat = client.chats.create(model=model, config=config, history=to_genai_history(history))
    response = chat.send_message(to_genai_parts(parts))
    return response.text or ""


def stream_chat_message(
    client: Any,
    model: str,
    history: List[Turn],
    parts: List[ContentPart],
    config: types.GenerateContentConfig,
) -> Iterator[str]:
    """Yield non-empty text fragments as Gemini produces them."""
    chat = client.chats.create(model=model, config=config, history=to_genai_history(history))
    for chunk in chat.send_message_stream(to_genai_parts(parts)):
        text = chunk.text
        if text:
            yield text


def generate_content(
    client: Any,
    model: str,
    parts: List[ContentPart],
    config: types.GenerateContentConfig,
) -> str:
    """Single-shot generation without chat history."""
    response = client.models.generate_content(model=model, contents=to_genai_parts(parts), config=config)
    return response.text or ""
