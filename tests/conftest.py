import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bot.app import create_app  # noqa: E402
from bot.routes import HANDLER_EXTENSION  # noqa: E402
from bot.transport import MessagingTransport  # noqa: E402

RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"  # Base32 of b"12345678901234567890"


class FakeTransport(MessagingTransport):
    """Records every outbound call instead of talking to Telegram."""

    def __init__(self, return_ids=True, error=None):
        self.sent = []
        self.edited = []
        self.callbacks = []
        self._next_id = 100
        self._return_ids = return_ids
        self._error = error

    def send_text(self, chat_id, text, reply_markup=None):
        if self._error is not None:
            raise self._error
        self.sent.append({"chat_id": chat_id, "text": text, "reply_markup": reply_markup})
        self._next_id += 1
        return self._next_id if self._return_ids else None

    def edit_text(self, chat_id, message_id, text, reply_markup=None):
        self.edited.append(
            {"chat_id": chat_id, "message_id": message_id, "text": text, "reply_markup": reply_markup}
        )

    def answer_callback(self, callback_query_id, text="", show_alert=False):
        self.callbacks.append({"id": callback_query_id, "text": text, "show_alert": show_alert})

    def all_texts(self):
        return [m["text"] for m in self.sent] + [m["text"] for m in self.edited]


def make_message(text=None, chat_type="private", chat_id=555, user=None, **extra):
    message = {
        "message_id": 1,
        "chat": {"id": chat_id, "type": chat_type},
        "from": user if user is not None else {"id": 42, "first_name": "Ada", "last_name": "Lovelace"},
    }
    if text is not None:
        message["text"] = text
    message.update(extra)
    return message


TEST_CONFIG = {
    "TESTING": True,
    "TELEGRAM_BOT_TOKEN": "test-token",
    "DEFAULT_LANGUAGE": "en",
    "MIN_SECRET_LENGTH": 16,
    "MAX_SECRET_LENGTH": 128,
    "RATE_LIMIT_MAX_REQUESTS": 5,
    "RATE_LIMIT_WINDOW_SECONDS": 60,
    "CORS_ORIGINS": "*",
    "LOG_LEVEL": "DEBUG",
}


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def app(transport):
    app = create_app(TEST_CONFIG, transport=transport)
    app.extensions[HANDLER_EXTENSION].clock = lambda: 59
    return app


@pytest.fixture
def client(app):
    return app.test_client()
