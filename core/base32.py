"""
base32.py - Lenient RFC 4648 Base32 decoder for shared OTP secrets.

Authenticator apps and web pages hand out secrets in many shapes:
lower case, grouped in blocks of four, with or without "=" padding.
This decoder accepts all of them:

1. upper-case the input
2. drop whitespace
3. drop every character outside ALPHABET (including "=")
4. map each char to its 5-bit value, concatenate, regroup into bytes

Trailing bits that do not fill a whole byte are discarded, not padded.
That keeps decoded keys byte-for-byte identical to what common
authenticator apps derive from the same text.
"""

import re

from .exceptions import EmptyInputError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_INDEX = {char: value for value, char in enumerate(ALPHABET)}
_NOT_ALPHABET = re.compile(r"[^A-Z2-7]")
_WHITESPACE = re.compile(r"\s+")


def normalize(secret: str) -> str:
    """
    Return the canonical form of a secret: upper case, alphabet chars only.

    Example: normalize("jbsw y3dp-ehpk=") -> "JBSWY3DPEHPK"
    """
    cleaned = _WHITESPACE.sub("", (secret or "").upper())
    return _NOT_ALPHABET.sub("", cleaned)


def decode(secret: str) -> bytes:
    """
    Decode a Base32 secret into raw key bytes.

    Arguments:
        secret: any string; it is normalized first

    Returns:
        bytes: the decoded key. May be empty when fewer than 8 valid bits
        were present; callers must reject that as an invalid key.

    Raises:
        EmptyInputError: if no Base32 character survives normalization
    """
    normalized = normalize(secret)
    if not normalized:
        raise EmptyInputError("secret contains no Base32 characters")

    out = bytearray()
    buffer = 0
    bits = 0
    for char in normalized:
        buffer = (buffer << 5) | _INDEX[char]
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1
    # whatever is left in the buffer (< 8 bits) is dropped
    return bytes(out)
