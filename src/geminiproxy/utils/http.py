"""Client address lookup and the two error body shapes the proxy returns."""
from flask import jsonify, request

from ..core.errors import ClientInputError


def get_client_ip() -> str:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.remote_addr or "unknown"


def status_for(exc: Exception) -> int:
    return 400 if isinstance(exc, ClientInputError) else 500


def error_response(message: str, status: int = 400):
    """OpenAI-style error body, used by /v1 routes and the HTTP error handlers."""
    error_type = "invalid_request_error" if status < 500 else "internal_server_error"
    payload = {
        "error": {
            "message": message,
            "type": error_type,
            "param": None,
            "code": None,
        }
    }
    return jsonify(payload), status


def error_response_for(exc: Exception):
    return error_response(str(exc), status_for(exc))


def failure_response(message: str, status: int = 500):
    """{success: false} body used by the upload and generate endpoints."""
    return jsonify({"success": False, "error": message}), status


def failure_response_for(exc: Exception):
    return failure_response(str(exc), status_for(exc))
