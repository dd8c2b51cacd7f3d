"""Round-robin API key rotation."""
import threading
from typing import Iterable

from .errors import NoApiKeysError
from ..utils.logging import log_event


class KeyRotator:
    """Ordered key pool with a wrapping cursor, shared by every request.

    Concurrent requests that hit a rate limit may each call ``advance``; the
    lock only keeps a single step atomic, so interleaved advances still move
    the cursor once per call.
    """

    def __init__(self, keys: Iterable[str], start: int = 0):
        self._keys = tuple(keys)
        self._lock = threading.Lock()
        self._index = start % len(self._keys) if self._keys else 0

    def __len__(self):
        return len(self._keys)

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> str:
        """Return the key at the cursor."""
        if not self._keys:
            raise NoApiKeysError()
        return self._keys[self._index]

    def advance(self) -> str:
        """Move the cursor to the next key and return it."""
        if not self._keys:
            raise NoApiKeysError()
        with self._lock:
            self._index = (self._index + 1) % len(self._keys)
            index = self._index
        log_event(20, "api_key_rotated", index=index, total=len(self._keys))
        return self._keys[index]
