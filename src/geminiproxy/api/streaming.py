"""SSE streaming for chat completions."""
import itertools
from typing import Callable, Iterable, Iterator

from ..core.retry import is_rate_limited
from ..utils.logging import log_event
from .formatters import (
    DONE_FRAME,
    build_content_chunk,
    build_finish_chunk,
    build_role_chunk,
    build_stream_error,
    sse_frame,
)


def open_fragment_stream(fragments: Iterable[str]) -> Iterator[str]:
    """Pull the first fragment eagerly so connection and rate-limit errors
    surface while the call is still inside the retry loop."""
    iterator = iter(fragments)
    try:
        first = next(iterator)
    except StopIteration:
        return iter(())
    return itertools.chain([first], iterator)


def stream_chat_sse(
    open_stream: Callable[[], Iterator[str]],
    response_model: str,
    response_id: str,
    created: int,
    request_id: str = "",
):
    """Emit Gemini fragments as OpenAI chat.completion.chunk SSE frames."""
    yield sse_frame(build_role_chunk(response_id, created, response_model))
    try:
        for text in open_stream():
            yield sse_frame(build_content_chunk(response_id, created, response_model, text))
        yield sse_frame(build_finish_chunk(response_id, created, response_model))
    except Exception as e:
        error_type = "rate_limit_error" if is_rate_limited(e) else "server_error"
        log_event(40, "stream_error", error=str(e), error_type=error_type, request_id=request_id)
        yield sse_frame(build_stream_error(str(e), error_type, response_id, created, response_model))
    yield DONE_FRAME
