"""Disk storage for uploaded files."""
from __future__ import annotations

import os
import time
import uuid

from werkzeug.datastructures import FileStorage
from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

from ..core.errors import ClientInputError

UPLOAD_URL_PREFIX = "/uploads/"


class UploadStore:
    def __init__(self, base_dir: str) -> None:
        self.base_dir = os.path.abspath(base_dir)

    def _make_filename(self, original: str | None) -> str:
        # secure_filename drops non-ASCII text, so the stem and extension are
        # cleaned separately and a random tag keeps same-millisecond names apart.
        stem, ext = os.path.splitext(original or "")
        ext = os.path.splitext(secure_filename(f"file{ext}"))[1]
        safe_stem = secure_filename(stem) or "file"
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_stem}{ext}"

    def save(self, storage: FileStorage) -> dict:
        """Write an uploaded file under a timestamped name and describe it."""
        os.makedirs(self.base_dir, exist_ok=True)
        filename = self._make_filename(storage.filename)
        path = os.path.join(self.base_dir, filename)
        storage.save(path)
        return {
            "filename": filename,
            "originalname": storage.filename or "",
            "mimetype": storage.mimetype or "application/octet-stream",
            "path": path,
            "url": f"{UPLOAD_URL_PREFIX}{filename}",
        }

    @staticmethod
    def is_upload_url(url: str) -> bool:
        return isinstance(url, str) and url.startswith(UPLOAD_URL_PREFIX)

    def resolve(self, url: str) -> str:
        """Map an ``/uploads/<name>`` reference to an existing file path."""
        relative = url[len(UPLOAD_URL_PREFIX):] if self.is_upload_url(url) else url
        path = safe_join(self.base_dir, relative)
        if path is None or not os.path.isfile(path):
            raise ClientInputError(f"Uploaded file not found: {url}")
        return path
