"""Environment-driven settings for the Gemini proxy."""
from dataclasses import dataclass
from functools import lru_cache
import os
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
DEFAULT_MODEL = "gemini-2.5-pro-exp-03-25"


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def parse_api_keys(pool_value: Optional[str], single_value: Optional[str]) -> Tuple[str, ...]:
    """Build the key pool, falling back to the single key when the pool is empty."""
    keys = _split_csv(pool_value or "")
    if not keys and single_value and single_value.strip():
        keys = (single_value.strip(),)
    return keys


@dataclass(frozen=True)
class Settings:
    api_keys: Tuple[str, ...]
    model: str
    host: str
    port: int
    upload_dir: str
    static_dir: str
    log_level: str
    log_dir: Optional[str]
    app_version: str
    max_body_mb: float
    max_upload_files: int
    upstream_timeout: Optional[float]
    cors_origins: Tuple[str, ...]
    unsupported_content_text: str
    strict_config: bool
    temperature: float = 0.1
    top_p: float = 0.95
    top_k: int = 64
    max_output_tokens: int = 500

    @property
    def max_content_length(self) -> int:
        return int(self.max_body_mb * 1024 * 1024)


@lru_cache
def get_settings() -> Settings:
    """Load settings from environment variables."""
    timeout = os.getenv("UPSTREAM_TIMEOUT")
    return Settings(
        api_keys=parse_api_keys(os.getenv("GEMINI_API_KEYS"), os.getenv("GEMINI_API_KEY")),
        model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        upload_dir=os.getenv("UPLOAD_DIR", os.path.join(BASE_DIR, "uploads")),
        static_dir=os.getenv("STATIC_DIR", os.path.join(BASE_DIR, "dist")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR") or None,
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        max_body_mb=float(os.getenv("MAX_BODY_MB", "50")),
        max_upload_files=int(os.getenv("MAX_UPLOAD_FILES", "10")),
        upstream_timeout=float(timeout) if timeout else None,
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")),
        unsupported_content_text=os.getenv("UNSUPPORTED_CONTENT_TEXT", "Unsupported content type"),
        strict_config=_env_flag("STRICT_CONFIG"),
    )
