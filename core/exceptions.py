"""
exceptions.py - Error kinds raised by the OTP core.

None of these messages ever contain the secret (raw, normalized or decoded).
Callers map each kind to their own user-facing text.
"""


class OTPError(Exception):
    """Base class for every failure raised by the core."""

    kind = "otp_error"


class InvalidSecretError(OTPError):
    """Secret decodes to zero bytes or fails the length policy."""

    kind = "invalid_secret"


class EmptyInputError(InvalidSecretError):
    """Secret has no characters from the Base32 alphabet at all."""

    kind = "empty_input"


class CryptoError(OTPError):
    """HMAC primitive rejected the key or failed while signing."""

    kind = "crypto_error"
