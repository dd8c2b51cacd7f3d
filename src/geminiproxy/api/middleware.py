"""Flask middleware registration for request ids, CORS, and access logging."""
import time
import uuid
from flask import g, request, Response

from ..utils.http import get_client_ip
from ..utils.logging import log_event


def register_middlewares(app, settings):
    """Register Flask middlewares on the app."""

    @app.before_request
    def attach_request_context():
        g.request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
        g.request_start = time.time()

    @app.after_request
    def add_headers(response):
        response.headers["X-Request-ID"] = getattr(g, "request_id", "")

        origins = settings.cors_origins
        request_origin = request.headers.get("Origin")
        allow_origin = None
        if "*" in origins:
            allow_origin = "*"
        elif request_origin and request_origin in origins:
            allow_origin = request_origin
            response.headers["Vary"] = "Origin"
        if allow_origin:
            response.headers["Access-Control-Allow-Origin"] = allow_origin
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, X-Request-ID"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"

        if request.path == "/health":
            return response
        latency_ms = None
        if hasattr(g, "request_start"):
            latency_ms = int((time.time() - g.request_start) * 1000)
        log_event(
            20,
            "request",
            method=request.method,
            path=request.path,
            status=response.status_code,
            latency_ms=latency_ms,
            stream=response.mimetype == "text/event-stream",
            client_ip=get_client_ip(),
        )
        return response

    @app.route('/', defaults={'path': ''}, methods=['OPTIONS'])
    @app.route('/<path:path>', methods=['OPTIONS'])
    def options_handler(path):
        return Response(status=204)
