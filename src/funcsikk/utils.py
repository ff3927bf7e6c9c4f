"""Category path, email and timestamp helpers."""

from __future__ import annotations

import re
from datetime import UTC, datetime

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def ensure_aware(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_expired(expires_at: datetime | None, now: datetime) -> bool:
    """Return True once *now* reaches *expires_at*. ``None`` never expires."""
    exp = ensure_aware(expires_at)
    if exp is None:
        return False
    return now >= exp


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.match(email.strip()) is not None


def split_category_path(path: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Split a '/'-delimited category path into non-empty segments.

    Lists and tuples are accepted as already-split paths.
    """
    if not path:
        return []
    parts = path.split("/") if isinstance(path, str) else list(path)
    return [p.strip() for p in parts if p and p.strip()]


def post_in_shared_category(
    post_category: str | None,
    shared_name_path: str | None,
    include_subcategories: bool,
) -> bool:
    """Check whether a post's category falls under a shared category.

    With *include_subcategories* the match is on whole segments, so a
    share on ``CTF`` covers ``CTF/Web`` but not ``CTFd``.
    """
    post_parts = split_category_path(post_category)
    shared_parts = split_category_path(shared_name_path)
    if not post_parts or not shared_parts:
        return False
    if include_subcategories:
        return post_parts[: len(shared_parts)] == shared_parts
    return post_parts == shared_parts
