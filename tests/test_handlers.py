import pytest

from bot.handlers import UpdateHandler, looks_like_secret, parse_command
from bot.messages import REFRESH_CALLBACK, get_text
from bot.rate_limit import RateLimiter
from core.exceptions import CryptoError
from conftest import FakeTransport, make_message

RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def handler(transport):
    return UpdateHandler(transport, clock=lambda: 59)


def test_parse_command():
    assert parse_command("/TOTP@MyBot  abc def ") == ("/totp", "abc def")
    assert parse_command("/start") == ("/start", "")
    assert parse_command("   ") == ("", "")


def test_secret_message_is_answered_with_code(handler, transport):
    status = handler.handle_update({"update_id": 1, "message": make_message(RFC_SECRET)})

    assert status == "generated"
    assert transport.sent[0]["text"] == get_text("loading_message")
    edit = transport.edited[0]
    assert edit["message_id"] == 101
    assert "`287082`" in edit["text"]
    assert "`1` Seconds" in edit["text"]
    assert "GEZDGNBV...QOJQ" in edit["text"]
    assert "[Ada Lovelace](tg://user?id=42)" in edit["text"]
    assert edit["reply_markup"]["inline_keyboard"][0][0]["callback_data"] == REFRESH_CALLBACK


def test_full_secret_never_appears_in_replies(handler, transport):
    handler.handle_update({"message": make_message(RFC_SECRET.lower())})
    for text in transport.all_texts():
        assert RFC_SECRET not in text
        assert RFC_SECRET.lower() not in text


def test_secret_is_cleaned_before_use(handler, transport):
    handler.handle_update({"message": make_message("gezd gnbv gy3t qojq gezd gnbv gy3t qojq")})
    assert "`287082`" in transport.edited[0]["text"]


def test_invalid_secret_in_private_chat_gets_error(handler, transport):
    status = handler.handle_update({"message": make_message("hello")})
    assert status == "invalid_secret"
    assert transport.sent == [
        {"chat_id": 555, "text": get_text("2fa_invalid_secret"), "reply_markup": None}
    ]
    assert transport.edited == []


def test_symbols_only_in_private_chat_gets_error(handler, transport):
    assert handler.handle_update({"message": make_message("!!!")}) == "invalid_secret"


def test_chatter_in_group_is_ignored(handler, transport):
    status = handler.handle_update({"message": make_message("good morning all", chat_type="group")})
    assert status == "ignored"
    assert transport.sent == []


@pytest.mark.parametrize("text", [
    "hello everyone how are you",
    "please review the deployment notes today",
    "Meeting at 5 in room 7",
    "ABCDEFGHIJKLMNOPQRSTUVWX",
])
def test_long_chatter_in_group_is_ignored(handler, transport, text):
    status = handler.handle_update({"message": make_message(text, chat_type="group")})
    assert status == "ignored"
    assert transport.sent == []
    assert transport.edited == []


def test_long_chatter_in_private_chat_still_generates(handler, transport):
    status = handler.handle_update({"message": make_message("hello everyone how are you")})
    assert status == "generated"


def test_valid_secret_in_group_is_answered(handler, transport):
    status = handler.handle_update({"message": make_message(RFC_SECRET, chat_type="supergroup")})
    assert status == "generated"


def test_lowercase_spaced_secret_in_group_is_answered(handler, transport):
    text = "gezd gnbv gy3t qojq gezd gnbv gy3t qojq"
    assert handler.handle_update({"message": make_message(text, chat_type="group")}) == "generated"
    assert "`287082`" in transport.edited[0]["text"]


@pytest.mark.parametrize("text,expected", [
    ("GEZDGNBVGY3TQOJQ", True),
    ("gezd-gnbv-gy3t-qojq====", True),
    ("  JBSWY3DPEHPK3PXP\n", True),
    ("hello everyone how are you", False),
    ("Jbswy3dpehpk3pxp", False),
    ("JBSWY3DPEHPK3PX1", False),
    ("JBSWY3DP EHPK3PXP!", False),
    ("", False),
])
def test_looks_like_secret(text, expected):
    assert looks_like_secret(text) is expected


def test_totp_command_with_secret(handler, transport):
    status = handler.handle_update({"message": make_message(f"/totp@MyBot {RFC_SECRET}", chat_type="group")})
    assert status == "generated"
    assert "`287082`" in transport.edited[0]["text"]


def test_totp_command_with_bad_secret_answers_in_group(handler, transport):
    status = handler.handle_update({"message": make_message("/totp nope", chat_type="group")})
    assert status == "invalid_secret"
    assert transport.sent[0]["text"] == get_text("2fa_invalid_secret")


def test_totp_command_without_secret(handler, transport):
    status = handler.handle_update({"message": make_message("/totp")})
    assert status == "secret_missing"
    assert transport.sent[0]["text"] == get_text("2fa_secret_missing")


@pytest.mark.parametrize("command", ["/start", "/help", "/START@MyBot"])
def test_welcome_commands(handler, transport, command):
    assert handler.handle_update({"message": make_message(command)}) == "welcome"
    assert "16 characters" in transport.sent[0]["text"]


def test_unknown_command_is_ignored(handler, transport):
    assert handler.handle_update({"message": make_message("/settings")}) == "ignored"
    assert transport.sent == []


def test_non_text_message_is_unsupported(handler, transport):
    message = make_message(photo=[{"file_id": "x"}])
    assert handler.handle_update({"message": message}) == "unsupported"
    assert transport.sent[0]["text"] == get_text("unsupported_update")


def test_callback_query_is_answered(handler, transport):
    update = {"callback_query": {"id": "cb-1", "data": REFRESH_CALLBACK, "from": {"id": 42}}}
    assert handler.handle_update(update) == "callback"
    assert transport.callbacks == [
        {"id": "cb-1", "text": get_text("callback_refresh"), "show_alert": True}
    ]


def test_other_updates_are_ignored(handler, transport):
    assert handler.handle_update({"update_id": 9, "edited_message": {}}) == "ignored"
    assert transport.sent == [] and transport.callbacks == []


def test_crypto_failure_edits_loading_message(handler, transport, monkeypatch):
    def broken(*args, **kwargs):
        raise CryptoError("HMAC-SHA1 signing failed")

    monkeypatch.setattr("bot.handlers.generate", broken)
    assert handler.handle_update({"message": make_message(RFC_SECRET)}) == "error"
    assert transport.edited[0]["text"] == get_text("2fa_error")
    assert transport.edited[0]["reply_markup"] is None


def test_reply_is_sent_when_loading_message_has_no_id():
    transport = FakeTransport(return_ids=False)
    handler = UpdateHandler(transport, clock=lambda: 59)
    assert handler.handle_update({"message": make_message(RFC_SECRET)}) == "generated"
    assert len(transport.sent) == 2
    assert "`287082`" in transport.sent[1]["text"]
    assert transport.edited == []


def test_rate_limit_per_user(transport):
    now = [1000.0]
    limiter = RateLimiter(2, 60, clock=lambda: now[0])
    handler = UpdateHandler(transport, limiter, clock=lambda: 59)
    update = {"message": make_message(RFC_SECRET)}

    assert handler.handle_update(update) == "generated"
    assert handler.handle_update(update) == "generated"
    assert handler.handle_update(update) == "rate_limited"
    assert transport.sent[-1]["text"] == get_text("rate_limited", wait="01:00")

    other_user = {"message": make_message(RFC_SECRET, user={"id": 7, "username": "bob"})}
    assert handler.handle_update(other_user) == "generated"

    now[0] += 60
    assert handler.handle_update(update) == "generated"


def test_invalid_secrets_do_not_consume_rate_limit(transport):
    limiter = RateLimiter(1, 60, clock=lambda: 0.0)
    handler = UpdateHandler(transport, limiter, clock=lambda: 59)
    handler.handle_update({"message": make_message("nope")})
    assert handler.handle_update({"message": make_message(RFC_SECRET)}) == "generated"


def test_min_length_policy_is_configurable(transport):
    handler = UpdateHandler(transport, min_length=8, clock=lambda: 59)
    assert handler.handle_update({"message": make_message("JBSWY3DP")}) == "generated"


def test_language_fallback(transport):
    handler = UpdateHandler(transport, language="my", clock=lambda: 59)
    handler.handle_update({"message": make_message("hello")})
    assert transport.sent[0]["text"] == get_text("2fa_invalid_secret", "my")
    handler.handle_update({"message": make_message(RFC_SECRET)})
    assert "`287082`" in transport.edited[0]["text"]
