"""
core package
============

TOTP / HOTP code generation per RFC 4226 & RFC 6238, with a lenient
RFC 4648 Base32 decoder for secrets pasted by users.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- Base32 decode:
  upper-case, strip whitespace and non-alphabet chars, 5 bits per char,
  regroup into bytes, drop trailing bits that do not fill a byte.

- HOTP:
  code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^6

- TOTP:
  HOTP with counter = floor(timestamp / 30)
  → the code changes every 30 seconds.

- Dynamic Truncation:
  4 bytes from offset (last byte & 0x0F), top bit cleared.

──────────────────────────────────────────────
Quick usage
──────────────────────────────────────────────
>>> from core import generate
>>> code, remaining = generate("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", 59)
>>> code, remaining
('287082', 1)
"""
from .base32 import ALPHABET, decode, normalize
from .exceptions import CryptoError, EmptyInputError, InvalidSecretError, OTPError
from .otp_core import (
    DIGITS,
    MAX_SECRET_LENGTH,
    MIN_SECRET_LENGTH,
    TIME_STEP,
    TOTPResult,
    generate,
    hotp,
    mask_secret,
    validate_secret,
)

__all__ = [
    "ALPHABET",
    "CryptoError",
    "DIGITS",
    "EmptyInputError",
    "InvalidSecretError",
    "MAX_SECRET_LENGTH",
    "MIN_SECRET_LENGTH",
    "OTPError",
    "TIME_STEP",
    "TOTPResult",
    "decode",
    "generate",
    "hotp",
    "mask_secret",
    "normalize",
    "validate_secret",
]
