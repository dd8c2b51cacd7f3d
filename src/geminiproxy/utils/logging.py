"""Structured logging helpers."""
import json
import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler

from flask import g, has_request_context

logger = logging.getLogger("geminiproxy")


def _resolve_log_dir(log_dir: str | None) -> str | None:
    if log_dir:
        return log_dir
    env_dir = os.getenv("LOG_DIR")
    if env_dir:
        return env_dir
    return None


def _file_logging_enabled() -> bool:
    return os.getenv("LOG_TO_FILE", "True").lower() in ("1", "true", "yes", "on")


def _build_rotating_handler(log_dir: str, filename: str) -> RotatingFileHandler:
    os.makedirs(log_dir, exist_ok=True)
    max_mb = float(os.getenv("LOG_FILE_MAX_MB", "10"))
    backup_count = int(os.getenv("LOG_FILE_BACKUPS", "5"))
    max_bytes = max(1, int(max_mb * 1024 * 1024))
    backup_count = max(1, backup_count)
    log_path = os.path.join(log_dir, filename)
    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(level: str, log_dir: str | None = None) -> None:
    """Configure root logging level and handlers."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stdout)]
    resolved_dir = _resolve_log_dir(log_dir)
    if resolved_dir and _file_logging_enabled():
        try:
            handlers.append(_build_rotating_handler(resolved_dir, "geminiproxy.log"))
        except OSError as exc:
            # Fall back to stdout-only if file logging can't be initialized.
            print(f"[geminiproxy] file logging disabled: {exc}", file=sys.stderr)
    logging.basicConfig(level=numeric, handlers=handlers, force=True)


def _current_request_id() -> str | None:
    if has_request_context():
        return getattr(g, "request_id", None)
    return None


def log_event(level: int, message: str, **fields) -> None:
    """Emit a structured log line.

    Keys come out in a fixed order: message, ts, request_id (taken from the
    active request when not passed), then the remaining fields by name.
    """
    request_id = fields.pop("request_id", None) or _current_request_id()
    payload = {"message": message, "ts": int(time.time())}
    if request_id:
        payload["request_id"] = request_id
    for key in sorted(fields):
        payload[key] = fields[key]
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
