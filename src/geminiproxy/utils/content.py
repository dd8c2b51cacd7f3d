"""Normalize OpenAI message content into typed content parts."""
from __future__ import annotations

import base64
import mimetypes
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from .uploads import UploadStore

DEFAULT_IMAGE_MIME = "image/jpeg"
DEFAULT_UNSUPPORTED_TEXT = "Unsupported content type"

_DATA_URI_RE = re.compile(r"^data:([^;]+);base64,(.+)$")

# Not every platform mime table knows webp.
mimetypes.add_type("image/webp", ".webp")


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class InlineImagePart:
    """Image bytes carried as base64 text plus their MIME type."""

    data: str
    mime_type: str

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


ContentPart = Union[TextPart, InlineImagePart]


def guess_mime_type(path: str, declared: Optional[str] = None) -> str:
    """Prefer the declared type, then the file extension, then a generic image type."""
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(path)
    return guessed or DEFAULT_IMAGE_MIME


def file_to_inline_part(path: str, mime_type: str) -> InlineImagePart:
    with open(path, "rb") as handle:
        data = handle.read()
    return InlineImagePart(data=base64.b64encode(data).decode("ascii"), mime_type=mime_type)


def parse_data_uri(url: str) -> Optional[InlineImagePart]:
    match = _DATA_URI_RE.match(url)
    if not match:
        return None
    return InlineImagePart(data=match.group(2), mime_type=match.group(1))


def _extract_image_url(item: dict) -> Optional[str]:
    image_url = item.get("image_url")
    if isinstance(image_url, str):
        return image_url
    if isinstance(image_url, dict):
        url = image_url.get("url")
        if isinstance(url, str):
            return url
    return None


class ContentNormalizer:
    """Turn a raw ``content`` value into an ordered list of content parts.

    Strings become one text part, lists are converted item by item, and any
    other value is rendered with ``str``. Items that cannot be converted
    degrade to a placeholder text part instead of failing the request.
    """

    def __init__(self, store: Optional[UploadStore] = None, unsupported_text: str = DEFAULT_UNSUPPORTED_TEXT):
        self.store = store
        self.unsupported_text = unsupported_text

    def normalize(self, content: Any) -> List[ContentPart]:
        if isinstance(content, str):
            return [TextPart(content)]
        if isinstance(content, list):
            return [self._normalize_item(item) for item in content]
        return [TextPart(str(content))]

    def _normalize_item(self, item: Any) -> ContentPart:
        if not isinstance(item, dict):
            return TextPart(self.unsupported_text)
        item_type = item.get("type")
        if item_type == "text":
            text = item.get("text")
            return TextPart(text if isinstance(text, str) else "")
        if item_type == "image_url":
            part = self._normalize_image(_extract_image_url(item))
            if part is not None:
                return part
        return TextPart(self.unsupported_text)

    def _normalize_image(self, url: Optional[str]) -> Optional[InlineImagePart]:
        if not url:
            return None
        if url.startswith("data:"):
            return parse_data_uri(url)
        if self.store is not None and self.store.is_upload_url(url):
            path = self.store.resolve(url)
            return file_to_inline_part(path, guess_mime_type(path))
        return None
