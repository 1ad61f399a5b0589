"""Container healthcheck entrypoint."""
import json
import os
import urllib.request


def _resolve_port() -> int:
    """Port from config.json, else PORT, else 4000."""
    port = int(os.getenv("PORT", "4000"))
    config_path = os.getenv("CONFIG_PATH", "/app/config.json")
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            config = json.load(handle)
        return int(config.get("server", {}).get("port", port))
    except (OSError, ValueError, TypeError, AttributeError):
        return port


def main() -> int:
    """Return exit code 0 if /healthz answers."""
    try:
        urllib.request.urlopen(f"http://127.0.0.1:{_resolve_port()}/healthz", timeout=2)
        return 0
    except OSError:
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
