"""
FLASK APP FACTORY - TOTP BOT SERVER
===================================

create_app() wires the pieces together:
- Config from the environment (bot/config.py), plus optional overrides
- logging for the whole process
- CORS for the JSON API
- the webhook blueprint and its UpdateHandler (transport + rate limiter)

Run locally:
    python -m bot.app
Then point the Telegram webhook at https://<host>/webhook.
"""
import logging
from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import Config
from .handlers import UpdateHandler
from .rate_limit import RateLimiter
from .routes import HANDLER_EXTENSION, bot_bp
from .transport import MessagingTransport, TelegramTransport

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def create_app(
    overrides: Optional[Mapping[str, Any]] = None,
    transport: Optional[MessagingTransport] = None,
) -> Flask:
    """
    Build the Flask app.

    Arguments:
        overrides: config keys that win over Config (tests, embedding)
        transport: MessagingTransport to use instead of TelegramTransport
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    _configure_logging(app.config["LOG_LEVEL"])

    # CORS only for the JSON API; Telegram does not need it
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    if transport is None and app.config["TELEGRAM_BOT_TOKEN"]:
        transport = TelegramTransport(
            app.config["TELEGRAM_BOT_TOKEN"],
            api_base=app.config["TELEGRAM_API_BASE"],
            timeout=app.config["TELEGRAM_TIMEOUT"],
        )

    if transport is not None:
        rate_limiter = RateLimiter(
            app.config["RATE_LIMIT_MAX_REQUESTS"],
            app.config["RATE_LIMIT_WINDOW_SECONDS"],
        )
        app.extensions[HANDLER_EXTENSION] = UpdateHandler(
            transport,
            rate_limiter,
            language=app.config["DEFAULT_LANGUAGE"],
            min_length=app.config["MIN_SECRET_LENGTH"],
            max_length=app.config["MAX_SECRET_LENGTH"],
        )
    else:
        app.logger.warning("TELEGRAM_BOT_TOKEN is not set; /webhook will answer 500")

    app.register_blueprint(bot_bp)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.name, "description": e.description}), e.code

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
