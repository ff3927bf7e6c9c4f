"""Share token minting and format validation."""

from __future__ import annotations

import re
import secrets

TOKEN_RE = re.compile(r"[A-Za-z0-9_-]{16,}")

DEFAULT_TOKEN_BYTES = 16
"""16 random bytes encode to a 22-character base64url token."""


def generate_share_token(nbytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """Return a URL-safe base64 token without padding."""
    return secrets.token_urlsafe(nbytes)


def is_valid_token_format(token: str | None) -> bool:
    """True when *token* is base64url and at least 16 characters long."""
    if not isinstance(token, str):
        return False
    return TOKEN_RE.fullmatch(token) is not None
