"""
BOT CONFIGURATION

Every setting comes from the environment (a local .env file is loaded
first). create_app() copies these class attributes into app.config and
applies any overrides passed by the caller.
"""
import os

from dotenv import load_dotenv

from core.otp_core import MAX_SECRET_LENGTH, MIN_SECRET_LENGTH

# .env must be loaded before the class body reads os.environ
load_dotenv()


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    # Telegram Bot API
    TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_API_BASE = os.environ.get("TELEGRAM_API_BASE", "https://api.telegram.org")
    TELEGRAM_TIMEOUT = _env_int("TELEGRAM_TIMEOUT", 10)

    # Replies
    DEFAULT_LANGUAGE = os.environ.get("DEFAULT_LANGUAGE", "en")

    # Secret length policy (normalized Base32 characters)
    MIN_SECRET_LENGTH = _env_int("MIN_SECRET_LENGTH", MIN_SECRET_LENGTH)
    MAX_SECRET_LENGTH = _env_int("MAX_SECRET_LENGTH", MAX_SECRET_LENGTH)

    # Sliding window per user
    RATE_LIMIT_MAX_REQUESTS = _env_int("RATE_LIMIT_MAX_REQUESTS", 5)
    RATE_LIMIT_WINDOW_SECONDS = _env_int("RATE_LIMIT_WINDOW_SECONDS", 60)

    # JSON API
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
