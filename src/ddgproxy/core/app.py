"""Application factory and entrypoint."""
import os
import time

import httpx
from flask import Flask

from .config import get_logging_config, get_server_port, load_config
from .models import ModelRegistry
from .settings import Settings, get_settings
from ..api.handlers import register_routes
from ..api.middleware import register_middlewares
from ..services.duck_service import DuckChatClient, create_http_client
from ..utils.logging import log_event, setup_logging


def create_app(settings: Settings | None = None, http_client: httpx.Client | None = None) -> Flask:
    """Create and configure the Flask application.

    ``http_client`` replaces the upstream client; tests pass one backed by
    ``httpx.MockTransport``.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir, settings.log_to_file)

    config = load_config(settings.config_path)
    registry = ModelRegistry(config["models"] or None)
    api_keys = set(settings.api_keys) | set(config["access_keys"])

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_content_length
    app.config["APP_STARTED_AT"] = time.time()
    app.config["SETTINGS"] = settings
    app.config["APP_CONFIG"] = config
    app.config["CONFIG_ERRORS"] = config["errors"]

    duck_client = DuckChatClient(
        http_client or create_http_client(settings.upstream_timeout),
        registry,
        status_url=settings.status_url,
        chat_url=settings.chat_url,
    )
    register_middlewares(app, api_keys, get_logging_config(config))
    register_routes(app, settings, registry, duck_client)
    log_event(20, "app_created", models=registry.ids(), auth="keys" if api_keys else "open")
    return app


def run() -> None:
    """Run the Flask development server."""
    app = create_app()
    settings = app.config["SETTINGS"]

    if settings.strict_config:
        config_errors = app.config["CONFIG_ERRORS"]
        if config_errors:
            for err in config_errors:
                log_event(40, "config_error", error=err)
            raise SystemExit("Strict config enabled; fix config.json errors.")

    port = get_server_port(app.config["APP_CONFIG"]) or int(os.getenv("PORT", 4000))
    debug = os.getenv("FLASK_DEBUG", "").lower() in ("1", "true", "yes", "on")
    app.run(host="0.0.0.0", port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    run()
