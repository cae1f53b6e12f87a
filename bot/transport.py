"""
MESSAGING TRANSPORT

The handler only talks to a MessagingTransport. TelegramTransport is the
production implementation (Bot API over HTTPS with requests); tests inject
an in-memory fake instead.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

import requests

from .messages import PARSE_MODE

logger = logging.getLogger(__name__)

ChatId = Union[int, str]


class TransportError(RuntimeError):
    """A Bot API call failed (network error, HTTP error or ok=false)."""

    def __init__(self, method: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{method}: {message}")
        self.method = method
        self.status_code = status_code


class MessagingTransport(ABC):
    @abstractmethod
    def send_text(self, chat_id: ChatId, text: str, reply_markup: Optional[dict] = None) -> Optional[int]:
        """Send a message and return its message_id."""

    @abstractmethod
    def edit_text(
        self,
        chat_id: ChatId,
        message_id: int,
        text: str,
        reply_markup: Optional[dict] = None,
    ) -> None:
        """Replace the text of a message sent earlier."""

    @abstractmethod
    def answer_callback(self, callback_query_id: str, text: str = "", show_alert: bool = False) -> None:
        """Acknowledge an inline keyboard button press."""


class TelegramTransport(MessagingTransport):
    def __init__(
        self,
        token: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
        parse_mode: str = PARSE_MODE,
    ) -> None:
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._parse_mode = parse_mode

    def _url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._token}/{method}"

    def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        try:
            response = self._session.post(self._url(method), json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            # the URL carries the token, keep it out of the log line
            logger.error("Telegram %s request failed: %s", method, type(e).__name__)
            raise TransportError(method, "request failed") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(method, "invalid JSON response", response.status_code) from e

        if not isinstance(body, dict) or not body.get("ok"):
            description = body.get("description", "unknown error") if isinstance(body, dict) else "unknown error"
            logger.warning("Telegram %s returned error %s: %s", method, response.status_code, description)
            raise TransportError(method, description, response.status_code)
        return body.get("result")

    def _message_payload(self, chat_id: ChatId, text: str, reply_markup: Optional[dict]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": self._parse_mode,
            "disable_web_page_preview": True,
        }
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return payload

    def send_text(self, chat_id, text, reply_markup=None):
        result = self._call("sendMessage", self._message_payload(chat_id, text, reply_markup))
        if isinstance(result, dict):
            return result.get("message_id")
        return None

    def edit_text(self, chat_id, message_id, text, reply_markup=None):
        payload = self._message_payload(chat_id, text, reply_markup)
        payload["message_id"] = message_id
        self._call("editMessageText", payload)

    def answer_callback(self, callback_query_id, text="", show_alert=False):
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id, "show_alert": show_alert}
        if text:
            payload["text"] = text
        self._call("answerCallbackQuery", payload)
