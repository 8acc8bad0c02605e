"""Helpers for signing Cube private REST API requests."""

from __future__ import annotations

import base64
import hashlib
import hmac
import re
import time

from cube_mm_bot.app.errors import InvalidKeyEncoding
from cube_mm_bot.app.models import SignedHeaders

SIGNATURE_PREFIX = b"cube.xyz"
SECRET_KEY_BYTES = 32
SECRET_HEX_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


def build_payload(now_seconds: int) -> bytes:
    """Return `cube.xyz` followed by the 8-byte little-endian timestamp."""
    if now_seconds < 0 or now_seconds >= 2**64:
        raise ValueError(f"timestamp out of range: {now_seconds}")
    return SIGNATURE_PREFIX + int(now_seconds).to_bytes(8, "little")


def decode_secret(secret_hex: str) -> bytes:
    if SECRET_HEX_PATTERN.fullmatch(secret_hex) is None:
        raise InvalidKeyEncoding(f"API secret must be {SECRET_KEY_BYTES * 2} hex characters")
    return bytes.fromhex(secret_hex)


def sign(secret_hex: str, now_seconds: int) -> str:
    """Return base64 HMAC SHA256 signature for the given timestamp."""
    key = decode_secret(secret_hex)
    digest = hmac.new(key, build_payload(now_seconds), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def signed_headers(api_key: str, secret_hex: str, now_seconds: int | None = None) -> SignedHeaders:
    """Create a fresh header set; the timestamp defaults to the current epoch second."""
    ts = int(time.time()) if now_seconds is None else int(now_seconds)
    return SignedHeaders(api_key=api_key, signature=sign(secret_hex, ts), timestamp=ts)
