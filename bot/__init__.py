"""
TOTP BOT PACKAGE

Flask webhook application around the core OTP library.
"""

from .app import create_app

__all__ = ['create_app']
