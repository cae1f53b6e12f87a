"""
BOT HTTP ROUTES - FLASK BLUEPRINT

Endpoints:
- POST /webhook    : Telegram delivers Update objects here
- GET  /health     : liveness check
- POST /api/totp   : JSON API over the same core, for scripts and demos

EXAMPLES:
curl http://localhost:5000/health
curl -X POST http://localhost:5000/api/totp -H "Content-Type: application/json" \
     -d '{"secret": "JBSWY3DPEHPK3PXP"}'
"""
import logging
import time

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from core.exceptions import OTPError
from core.otp_core import TIME_STEP, generate

from .transport import TransportError

logger = logging.getLogger(__name__)

bot_bp = Blueprint("bot", __name__)

HANDLER_EXTENSION = "totp_bot.handler"


@bot_bp.route("/webhook", methods=["POST"])
def webhook():
    """
    Receive one Telegram Update.

    Always answers 200 once the update was understood, even when a reply
    could not be delivered; otherwise Telegram keeps redelivering it.
    """
    update = request.get_json(silent=True)
    if not isinstance(update, dict):
        raise BadRequest("Update must be a JSON object")

    handler = current_app.extensions.get(HANDLER_EXTENSION)
    if handler is None:
        logger.error("TELEGRAM_BOT_TOKEN is not set; dropping update %s", update.get("update_id"))
        return jsonify({"ok": False, "error": "Token not configured."}), 500

    try:
        status = handler.handle_update(update)
    except TransportError as e:
        logger.error("Could not deliver reply for update %s: %s", update.get("update_id"), e)
        status = "transport_error"
    return jsonify({"ok": True, "status": status})


@bot_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@bot_bp.route("/api/totp", methods=["POST"])
def api_totp():
    """
    Generate the TOTP code for a secret.

    Input (JSON body):
      {
        "secret": "JBSWY3DPEHPK3PXP",   # REQUIRED - Base32 secret
        "timestamp": 1700000000         # optional, Unix seconds (default: now)
      }

    Output:
      {"code": "123456", "remaining": 17, "period": 30, "timestamp": 1700000000}

    The secret is never echoed back.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    secret = data.get("secret")
    if not isinstance(secret, str) or not secret:
        return jsonify({"error": "Secret is required"}), 400

    timestamp = data.get("timestamp")
    if timestamp is None:
        timestamp = int(time.time())
    if isinstance(timestamp, bool) or not isinstance(timestamp, int) or timestamp < 0:
        return jsonify({"error": "timestamp must be a non-negative integer"}), 400

    try:
        code, remaining = generate(
            secret,
            timestamp,
            min_length=current_app.config["MIN_SECRET_LENGTH"],
            max_length=current_app.config["MAX_SECRET_LENGTH"],
        )
    except OTPError as e:
        return jsonify({"error": e.kind}), 400
    except ValueError:
        return jsonify({"error": "timestamp out of range"}), 400

    return jsonify({
        "code": code,
        "remaining": remaining,
        "period": TIME_STEP,
        "timestamp": timestamp,
    })
