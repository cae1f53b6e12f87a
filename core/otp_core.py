"""
otp_core.py - Core library for TOTP / HOTP code generation.

Goals:
- Pure functions only, so the webhook bot, the JSON API and the CLI can
  all call the same code path.
- No argparse, no HTTP, no file I/O here.

Security notes:
- The decoded key lives only inside one call. Nothing here logs, caches
  or persists a secret, and no exception message carries one.
- HMAC-SHA1 as in RFC 4226 / RFC 6238 (what Google Authenticator uses).
"""

import hashlib
import hmac
import struct
import time
from typing import NamedTuple, Optional

from .base32 import decode, normalize
from .exceptions import CryptoError, EmptyInputError, InvalidSecretError

# --- Config / constants ----------------------------------------------------
DIGITS = 6                  # RFC 6238 recommends 6 digits
TIME_STEP = 30              # seconds per code; fixed, not user-configurable
MIN_SECRET_LENGTH = 16      # 16 Base32 chars = 80 bits, the RFC 4226 minimum
MAX_SECRET_LENGTH = 128     # anything longer is not a pasted secret
SHA1_DIGEST_SIZE = 20
MAX_COUNTER = 2 ** 64 - 1   # largest value the 8-byte counter holds


class TOTPResult(NamedTuple):
    """Code plus the seconds left before it rolls over (1..30)."""

    code: str
    seconds_remaining: int


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(counter: int) -> bytes:
    """
    Pack the HOTP counter as 8-byte big-endian, as RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        ValueError: counter is negative or does not fit in 8 bytes
    """
    if not 0 <= counter <= MAX_COUNTER:
        raise ValueError("counter out of range")
    return struct.pack(">Q", counter)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Apply RFC 4226 dynamic truncation.

    - offset = last_byte & 0x0F
    - take 4 bytes from offset as a big-endian integer
    - clear the top bit so the result is a positive 31-bit value
    """
    offset = hmac_digest[-1] & 0x0F
    (value,) = struct.unpack(">I", hmac_digest[offset:offset + 4])
    return value & 0x7FFFFFFF


def hotp_from_key(key: bytes, counter: int, digits: int = DIGITS) -> str:
    """
    Compute an HOTP code from an already decoded key.

    Steps:
    1. message = 8-byte counter
    2. HMAC-SHA1(key, message)
    3. dynamic truncation
    4. value % 10^digits, zero-padded to `digits`

    Raises:
        CryptoError: empty key, or the HMAC primitive failed
        ValueError: counter does not fit in 8 bytes
    """
    if not key:
        raise CryptoError("HMAC key must not be empty")
    message = int_to_bytes(counter)
    try:
        digest = hmac.new(key, message, hashlib.sha1).digest()
    except (TypeError, ValueError) as e:
        raise CryptoError("HMAC-SHA1 signing failed") from e
    if len(digest) != SHA1_DIGEST_SIZE:
        raise CryptoError("unexpected HMAC-SHA1 digest size")

    code = dynamic_truncate(digest) % (10 ** digits)
    return str(code).zfill(digits)


def hotp(secret_b32: str, counter: int, digits: int = DIGITS) -> str:
    """
    Generate an HOTP code (RFC 4226) for a Base32 secret and a counter.

    Raises:
        EmptyInputError: no Base32 characters in the secret
        InvalidSecretError: secret decodes to zero bytes
        CryptoError: HMAC failure
    """
    key = decode(secret_b32)
    if not key:
        raise InvalidSecretError("secret decodes to zero bytes")
    return hotp_from_key(key, counter, digits)


# --- Secret policy ---------------------------------------------------------
def validate_secret(
    secret: str,
    min_length: int = MIN_SECRET_LENGTH,
    max_length: Optional[int] = MAX_SECRET_LENGTH,
) -> str:
    """
    Normalize a user-supplied secret and apply the length policy.

    No multiple-of-8 rule: the decoder already tolerates partial trailing
    groups, so "JBSWY3DPEHPK3PXP"-style 16-char secrets pass as they are.

    Returns:
        str: the normalized secret

    Raises:
        EmptyInputError: nothing left after normalization
        InvalidSecretError: shorter than min_length or longer than max_length
    """
    normalized = normalize(secret)
    if not normalized:
        raise EmptyInputError("secret contains no Base32 characters")
    if len(normalized) < min_length:
        raise InvalidSecretError(f"secret must be at least {min_length} Base32 characters")
    if max_length is not None and len(normalized) > max_length:
        raise InvalidSecretError(f"secret must be at most {max_length} Base32 characters")
    return normalized


def mask_secret(normalized: str) -> str:
    """Short display form, e.g. "GEZDGNBV...QOJQ": first 8 and last 4 chars."""
    if len(normalized) <= 12:
        return "*" * len(normalized)
    return f"{normalized[:8]}...{normalized[-4:]}"


# --- TOTP ------------------------------------------------------------------
def generate(
    secret: str,
    at_time: Optional[int] = None,
    *,
    min_length: int = MIN_SECRET_LENGTH,
    max_length: Optional[int] = MAX_SECRET_LENGTH,
) -> TOTPResult:
    """
    Generate the TOTP code (RFC 6238) valid at `at_time`.

    counter = floor(at_time / 30), T0 = 0, 6 digits, HMAC-SHA1.

    Arguments:
        secret: raw Base32 text as the user typed it
        at_time: Unix seconds; None means "now"
        min_length / max_length: accepted normalized secret length

    Returns:
        TOTPResult(code, seconds_remaining), unpackable as a tuple

    Raises:
        EmptyInputError, InvalidSecretError, CryptoError
        ValueError: negative timestamp, or one past the last 64-bit time step
    """
    if at_time is None:
        at_time = time.time()
    at_time = int(at_time)
    if at_time < 0:
        raise ValueError("timestamp must be non-negative")
    if at_time // TIME_STEP > MAX_COUNTER:
        raise ValueError("timestamp out of range")

    normalized = validate_secret(secret, min_length, max_length)
    key = decode(normalized)
    if not key:
        raise InvalidSecretError("secret decodes to zero bytes")

    counter = at_time // TIME_STEP
    code = hotp_from_key(key, counter, DIGITS)
    remaining = TIME_STEP - (at_time % TIME_STEP)
    return TOTPResult(code, remaining)
