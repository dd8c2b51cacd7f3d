"""Pydantic request schemas for API endpoints."""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    # Content is kept raw; normalization decides how each shape is handled.
    model_config = ConfigDict(extra="allow")

    role: str
    content: Any = None


class ChatCompletionsRequest(BaseModel):
    # Allow forward-compat fields from clients; we ignore unsupported ones.
    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    messages: List[ChatMessage]
    stream: bool = False
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    max_completion_tokens: Optional[int] = None


class InlineImage(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    data: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
