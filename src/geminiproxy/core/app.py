"""Application factory and entrypoint."""
import os
import time
from functools import partial

from flask import Flask

from ..api.handlers import register_routes
from ..api.middleware import register_middlewares
from ..services.gemini_service import create_client
from ..utils.logging import log_event, setup_logging
from ..utils.uploads import UploadStore
from .retry import RetryExecutor
from .rotation import KeyRotator
from .settings import get_settings


def create_app(settings=None, client_factory=None) -> Flask:
    """Create and configure the Flask application.

    ``client_factory`` maps an API key to a Gemini client; it defaults to
    google-genai and is replaced in tests.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    if client_factory is None:
        client_factory = partial(create_client, timeout=settings.upstream_timeout)
    executor = RetryExecutor(KeyRotator(settings.api_keys), client_factory)
    store = UploadStore(settings.upload_dir)

    app = Flask(__name__, static_folder=settings.static_dir, static_url_path="")
    app.config["MAX_CONTENT_LENGTH"] = settings.max_content_length
    app.config["APP_STARTED_AT"] = time.time()
    app.config["SETTINGS"] = settings
    app.config["RETRY_EXECUTOR"] = executor

    register_middlewares(app, settings)
    register_routes(app, settings, executor, store)
    return app


def run() -> None:
    """Run the Flask development server."""
    app = create_app()
    settings = app.config["SETTINGS"]

    if not settings.api_keys:
        if settings.strict_config:
            log_event(40, "config_error", error="GEMINI_API_KEYS or GEMINI_API_KEY must be set")
            raise SystemExit("Strict config enabled; no Gemini API key configured.")
        log_event(30, "no_api_keys")

    debug = os.getenv("FLASK_DEBUG", "").lower() in ("1", "true", "yes", "on")
    log_event(
        20,
        "server_started",
        port=settings.port,
        model=settings.model,
        api_keys=len(settings.api_keys),
        chat_url=f"http://localhost:{settings.port}/v1/chat/completions",
    )
    app.run(host=settings.host, port=settings.port, debug=debug, threaded=True)


if __name__ == "__main__":
    run()
