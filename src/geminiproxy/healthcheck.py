"""Container healthcheck entrypoint."""
import os
import urllib.request


def _resolve_port() -> int:
    try:
        return int(os.getenv("PORT", "3000"))
    except ValueError:
        return 3000


def main() -> int:
    """Return exit code 0 if /health is reachable."""
    port = _resolve_port()
    try:
        urllib.request.urlopen(f"http://127.0.0.1:{port}/health", timeout=2)
        return 0
    except Exception:
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
