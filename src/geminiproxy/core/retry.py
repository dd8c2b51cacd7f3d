"""Retry backend calls across the key pool when a key is rate limited."""
from typing import Any, Callable, Optional

from .errors import CredentialsExhaustedError
from .rotation import KeyRotator
from ..utils.logging import log_event

RATE_LIMIT_MARKERS = ("429", "quota", "rate limit", "too many requests")


def is_rate_limited(error: BaseException) -> bool:
    """Return True when the error message signals a per-key rate limit."""
    message = str(error)
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class RetryExecutor:
    """Run a backend call with a client bound to the rotator's current key.

    ``client_factory`` is called with the key on every attempt, so each retry
    gets a fresh client. Only rate-limit errors rotate and retry; anything
    else propagates untouched.
    """

    def __init__(self, rotator: KeyRotator, client_factory: Callable[[str], Any]):
        self.rotator = rotator
        self.client_factory = client_factory

    def execute(self, call: Callable[[Any], Any], max_retries: Optional[int] = None) -> Any:
        if max_retries is None:
            max_retries = len(self.rotator)
        attempt = 0
        while attempt < max_retries:
            try:
                client = self.client_factory(self.rotator.current())
                return call(client)
            except Exception as exc:
                if not is_rate_limited(exc) or attempt >= max_retries - 1:
                    raise
                log_event(
                    30,
                    "rate_limited_retry",
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    index=self.rotator.index,
                )
                self.rotator.advance()
                attempt += 1
        raise CredentialsExhaustedError()
