"""OpenAI-compatible response bodies and SSE frames."""
import json
import time
import uuid
from typing import Optional

DONE_FRAME = "data: [DONE]\n\n"

# Gemini does not report token counts the way OpenAI does. -1 means
# "unknown" and must not be read as zero usage.
UNKNOWN_TOKENS = -1


def make_response_id(prefix: str = "chatcmpl") -> str:
    return f"{prefix}-{int(time.time() * 1000)}{uuid.uuid4().hex[:8]}"


def sse_frame(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def unknown_usage() -> dict:
    return {
        "prompt_tokens": UNKNOWN_TOKENS,
        "completion_tokens": UNKNOWN_TOKENS,
        "total_tokens": UNKNOWN_TOKENS,
    }


def build_chat_completion(content: str, model: str, response_id: Optional[str] = None, created: Optional[int] = None) -> dict:
    return {
        "id": response_id or make_response_id(),
        "object": "chat.completion",
        "created": created if created is not None else int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": content,
                },
                "finish_reason": "stop",
                "logprobs": None,
            }
        ],
        "usage": unknown_usage(),
    }


def build_chunk(response_id: str, created: int, model: str, delta: dict, finish_reason: Optional[str] = None) -> dict:
    return {
        "id": response_id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": model,
        "choices": [
            {
                "index": 0,
                "delta": delta,
                "finish_reason": finish_reason,
            }
        ],
    }


def build_role_chunk(response_id: str, created: int, model: str) -> dict:
    return build_chunk(response_id, created, model, {"role": "assistant", "content": ""})


def build_content_chunk(response_id: str, created: int, model: str, text: str) -> dict:
    return build_chunk(response_id, created, model, {"content": text})


def build_finish_chunk(response_id: str, created: int, model: str) -> dict:
    return build_chunk(response_id, created, model, {}, finish_reason="stop")


def build_stream_error(message: str, error_type: str, response_id: str, created: int, model: str) -> dict:
    """Error frame for a stream that already returned HTTP 200."""
    return {
        "id": response_id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": model,
        "choices": [],
        "error": {"message": message, "type": error_type},
    }
