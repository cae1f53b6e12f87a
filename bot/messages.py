"""
BOT REPLY TEXTS

Language pack plus the helpers that turn a TOTPResult into the Markdown
message sent back to the chat. Keys missing from a language fall back to
DEFAULT_LANGUAGE, then to the key itself.
"""
from typing import Optional

from core.otp_core import TOTPResult

DEFAULT_LANGUAGE = "en"
PARSE_MODE = "Markdown"
REFRESH_CALLBACK = "totp:refresh"

LANGUAGE_PACK = {
    "en": {
        "2fa_secret_missing": "*❌ Secret not provided.* Please send me the Base32 secret directly.",
        "2fa_invalid_secret": "*❌ Invalid Secret.* Please provide a valid Base32 secret string (A-Z, 2-7).",
        "2fa_error": "*❌ Error generating code.* Please check your secret.",
        "loading_message": "*Generating TOTP code...*",
        "unsupported_update": "I can only process text messages for TOTP generation.",
        "welcome": (
            "*🔐 TOTP Generator*\n"
            "Send me a Base32 secret (A-Z, 2-7, at least {min_length} characters) "
            "and I will reply with the current 6-digit code.\n"
            "You can also use `/totp <secret>`."
        ),
        "rate_limited": "*⏳ Too many requests.* Please try again in `{wait}`.",
        "callback_refresh": "Secrets are not stored. Send the secret again for a fresh code.",
        "refresh_button": "🔄 Refresh",
        "code_generated": (
            "*🔐 TOTP Code Generated ✅*\n"
            "━━━━━━━━━━━━━━━━━━\n"
            "*Code:* `{code}`\n"
            "*Expires In:* `{remaining}` Seconds\n"
            "━━━━━━━━━━━━━━━━━━\n"
            "*Secret:* `{secret}`\n\n"
            "*Generated By:* {user}"
        ),
    },
    "my": {
        "2fa_secret_missing": "*❌ လျှို့ဝှက်ကုဒ်မထည့်သွင်းပါ။* Base32 လျှို့ဝှက်ကုဒ်ကို တိုက်ရိုက်ပို့ပေးပါ။",
        "2fa_invalid_secret": "*❌ မမှန်ကန်သော လျှို့ဝှက်ကုဒ်။* မှန်ကန်သော Base32 စာသား (A-Z, 2-7) ကို ပေးပို့ပါ။",
        "2fa_error": "*❌ ကုဒ်ထုတ်လုပ်ရာတွင် အမှားပေါ်။* လျှို့ဝှက်ကုဒ်ကို စစ်ဆေးပါ။",
        "loading_message": "*TOTP ကုဒ်ကို ထုတ်လုပ်နေသည်...*",
        "unsupported_update": "TOTP ထုတ်လုပ်ရန်အတွက် စာသားမက်ဆေ့ချ်များကိုသာ စီမံဆောင်ရွက်နိုင်ပါသည်။",
    },
}

# Legacy Telegram Markdown only treats these as markup
_MARKDOWN_SPECIAL = ("_", "*", "`", "[")


def get_text(key: str, language: Optional[str] = None, **replacements) -> str:
    """Look up `key` in the language pack and fill `{placeholders}`."""
    pack = LANGUAGE_PACK.get(language or DEFAULT_LANGUAGE) or LANGUAGE_PACK[DEFAULT_LANGUAGE]
    text = pack.get(key)
    if text is None:
        text = LANGUAGE_PACK[DEFAULT_LANGUAGE].get(key, key)
    for placeholder, value in replacements.items():
        text = text.replace("{" + placeholder + "}", str(value))
    return text


def escape_markdown(text: str) -> str:
    if not text:
        return ""
    for char in _MARKDOWN_SPECIAL:
        text = text.replace(char, "\\" + char)
    return text


def user_link(from_user: Optional[dict]) -> str:
    """Markdown mention: [First Last](tg://user?id=123)."""
    if not from_user or from_user.get("id") is None:
        return "Unknown User"
    user_id = from_user["id"]
    name = f"{from_user.get('first_name') or ''} {from_user.get('last_name') or ''}".strip()
    name = name or from_user.get("username") or f"User {user_id}"
    return f"[{escape_markdown(name)}](tg://user?id={user_id})"


def format_time(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def refresh_keyboard(language: Optional[str] = None) -> dict:
    return {
        "inline_keyboard": [
            [{"text": get_text("refresh_button", language), "callback_data": REFRESH_CALLBACK}]
        ]
    }


def format_code_message(
    result: TOTPResult,
    masked_secret: str,
    mention: str,
    language: Optional[str] = None,
) -> str:
    return get_text(
        "code_generated",
        language,
        code=result.code,
        remaining=result.seconds_remaining,
        secret=masked_secret,
        user=mention,
    )
