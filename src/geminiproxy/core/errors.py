"""Exception types shared by the proxy."""


class ClientInputError(ValueError):
    """The inbound request is missing or carries an invalid field."""


class NoApiKeysError(RuntimeError):
    """No Gemini API key is configured."""

    def __init__(self, message: str = "No Gemini API keys configured"):
        super().__init__(message)


class CredentialsExhaustedError(RuntimeError):
    """The retry loop ended without a successful attempt."""

    def __init__(self, message: str = "All API keys have hit their rate limit"):
        super().__init__(message)
