"""
UPDATE HANDLER

Routes one Telegram Update to the right flow:

- /start, /help      -> welcome text
- /totp <secret>     -> secret flow (always answers)
- plain text         -> secret flow (groups: only secret-shaped text, silent on invalid input)
- non-text message   -> "unsupported" reply
- callback_query     -> refresh notice
- anything else      -> ignored

The secret flow never stores the secret: it is validated, turned into a
code and dropped when the call returns. Log lines carry ids only.
"""
import logging
import re
import time
from typing import Callable, Optional, Tuple

from core.exceptions import CryptoError, InvalidSecretError
from core.otp_core import MAX_SECRET_LENGTH, MIN_SECRET_LENGTH, generate, mask_secret, validate_secret

from .messages import format_code_message, format_time, get_text, refresh_keyboard, user_link
from .rate_limit import RateLimiter
from .transport import MessagingTransport

logger = logging.getLogger(__name__)

WELCOME_COMMANDS = ("/start", "/help")
TOTP_COMMAND = "/totp"


def parse_command(text: str) -> Tuple[str, str]:
    """
    Split "/cmd@BotName arg1 arg2" into ("/cmd", "arg1 arg2").
    """
    parts = text.strip().split(None, 1)
    if not parts:
        return "", ""
    base = parts[0].split("@", 1)[0].lower()
    params = parts[1] if len(parts) > 1 else ""
    return base, params


_SECRET_SHAPE = re.compile(r"[A-Za-z2-7=\s-]+")
_SECRET_DIGIT = re.compile(r"[2-7]")


def looks_like_secret(text: str) -> bool:
    """
    Heuristic for plain group messages: is this a pasted Base32 secret?

    Only Base32 letters, digits 2-7, whitespace, "=" and "-" are allowed,
    at least one digit 2-7 must appear, and letters must not mix case.
    Letters-only secrets in groups need the /totp command.
    """
    if not _SECRET_SHAPE.fullmatch(text) or not _SECRET_DIGIT.search(text):
        return False
    letters = "".join(ch for ch in text if ch.isalpha())
    return letters.isupper() or letters.islower() or not letters


class UpdateHandler:
    def __init__(
        self,
        transport: MessagingTransport,
        rate_limiter: Optional[RateLimiter] = None,
        language: str = "en",
        min_length: int = MIN_SECRET_LENGTH,
        max_length: int = MAX_SECRET_LENGTH,
        clock: Callable[[], float] = time.time,
    ):
        self.transport = transport
        self.rate_limiter = rate_limiter
        self.language = language
        self.min_length = min_length
        self.max_length = max_length
        self.clock = clock

    def text(self, key: str, **replacements) -> str:
        return get_text(key, self.language, **replacements)

    def handle_update(self, update: dict) -> str:
        """Process one update and return a short status label."""
        if update.get("message"):
            return self._handle_message(update["message"])
        if update.get("callback_query"):
            return self._handle_callback(update["callback_query"])
        logger.debug("Ignoring update %s without message", update.get("update_id"))
        return "ignored"

    # --- message flows ---------------------------------------------------
    def _handle_message(self, message: dict) -> str:
        chat_id = message["chat"]["id"]
        text = message.get("text")

        if text is None:
            self.transport.send_text(chat_id, self.text("unsupported_update"))
            return "unsupported"

        if text.strip().startswith("/"):
            return self._handle_command(message, text)
        return self._handle_secret(message, text, explicit=False)

    def _handle_command(self, message: dict, text: str) -> str:
        chat_id = message["chat"]["id"]
        base, params = parse_command(text)

        if base in WELCOME_COMMANDS:
            self.transport.send_text(chat_id, self.text("welcome", min_length=self.min_length))
            return "welcome"
        if base == TOTP_COMMAND:
            if not params.strip():
                self.transport.send_text(chat_id, self.text("2fa_secret_missing"))
                return "secret_missing"
            return self._handle_secret(message, params, explicit=True)

        logger.debug("Ignoring unknown command %s", base)
        return "ignored"

    def _handle_secret(self, message: dict, raw_secret: str, explicit: bool) -> str:
        chat = message["chat"]
        chat_id = chat["id"]
        from_user = message.get("from") or {}
        user_id = from_user.get("id", chat_id)
        in_group = chat.get("type", "private") != "private"

        if in_group and not explicit and not looks_like_secret(raw_secret):
            return "ignored"

        try:
            normalized = validate_secret(raw_secret, self.min_length, self.max_length)
        except InvalidSecretError as e:
            if in_group and not explicit:
                # secret-shaped chatter that is still too short
                return "ignored"
            logger.info("Rejected secret from user=%s: %s", user_id, e.kind)
            self.transport.send_text(chat_id, self.text("2fa_invalid_secret"))
            return "invalid_secret"

        if self.rate_limiter is not None:
            decision = self.rate_limiter.allow(user_id)
            if not decision.allowed:
                logger.info("Rate limited user=%s for %ss", user_id, decision.retry_after)
                self.transport.send_text(
                    chat_id, self.text("rate_limited", wait=format_time(decision.retry_after))
                )
                return "rate_limited"

        loading_id = self.transport.send_text(chat_id, self.text("loading_message"))

        reply_markup = None
        try:
            result = generate(
                normalized,
                self.clock(),
                min_length=self.min_length,
                max_length=self.max_length,
            )
        except InvalidSecretError as e:
            logger.info("Secret from user=%s failed to decode: %s", user_id, e.kind)
            reply, status = self.text("2fa_invalid_secret"), "invalid_secret"
        except CryptoError:
            logger.exception("TOTP generation failed for user=%s", user_id)
            reply, status = self.text("2fa_error"), "error"
        else:
            reply = format_code_message(
                result, mask_secret(normalized), user_link(from_user), self.language
            )
            reply_markup = refresh_keyboard(self.language)
            status = "generated"
            logger.info("Generated TOTP for chat=%s user=%s", chat_id, user_id)

        if loading_id is None:
            self.transport.send_text(chat_id, reply, reply_markup)
        else:
            self.transport.edit_text(chat_id, loading_id, reply, reply_markup)
        return status

    # --- callbacks -------------------------------------------------------
    def _handle_callback(self, callback_query: dict) -> str:
        self.transport.answer_callback(
            callback_query["id"], self.text("callback_refresh"), show_alert=True
        )
        return "callback"
