#!/usr/bin/env python3
"""
otp_cli.py - CLI wrapper around otp_core.py

Subcommands:
- totp : print the current TOTP code (or keep refreshing with --watch)
- hotp : print the HOTP code for a given counter

The secret is read from --secret, then $TOTP_SECRET, then a hidden prompt.
It is never echoed back.
"""

import argparse
import getpass
import os
import sys
import time

from . import otp_core
from .exceptions import OTPError

SECRET_ENV = "TOTP_SECRET"


def _read_secret(args) -> str:
    if args.secret:
        return args.secret
    env_secret = os.environ.get(SECRET_ENV)
    if env_secret:
        return env_secret
    return getpass.getpass("Base32 secret: ")


# --- CLI command handlers ---
def cmd_totp(args):
    secret = _read_secret(args)
    if not args.watch:
        code, remaining = otp_core.generate(secret, args.time)
        print(f"TOTP: {code}  (valid {remaining:2d}s)")
        return 0

    print("Press Ctrl+C to quit. Generating TOTP in real time...\n")
    last_code = None
    try:
        while True:
            code, remaining = otp_core.generate(secret)
            if code != last_code:
                print(f"TOTP: {code}  (valid ~{remaining:2d}s)")
                last_code = code
            else:
                print(f".. {remaining:2d}s left", end="\r", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_hotp(args):
    secret = _read_secret(args)
    code = otp_core.hotp(secret, args.counter)
    print(f"HOTP(counter={args.counter}): {code}")
    return 0


def cmd_help(args):
    print("'totp-cli -h' for help.")
    return 0


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="TOTP/HOTP (HMAC-SHA1) code generator")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # totp
    pt = sub.add_parser("totp", help="Show the TOTP code for a Base32 secret")
    pt.add_argument("--secret", help=f"Base32 secret (default: ${SECRET_ENV} or prompt)")
    pt.add_argument("--time", type=int, help="Unix timestamp to compute the code for")
    pt.add_argument("--watch", action="store_true", help="Refresh every second until Ctrl+C")
    pt.set_defaults(func=cmd_totp)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    ph.add_argument("--secret", help=f"Base32 secret (default: ${SECRET_ENV} or prompt)")
    ph.add_argument("--counter", type=int, required=True)
    ph.set_defaults(func=cmd_hotp)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except (OTPError, ValueError) as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
