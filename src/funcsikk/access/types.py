"""Result types: AccessResult, TokenAccessResult, CategoryTokenAccessResult."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from funcsikk.exceptions import InvalidArgumentError


class AccessMode(str, Enum):
    """Which grant allowed the request."""

    ADMIN = "admin"
    INVITED = "invited"
    PUBLIC_TOKEN = "public_token"


class DenialReason(str, Enum):
    """Why the request was denied."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    NOT_INVITED = "not_invited"
    LOGIN_REQUIRED = "login_required"
    INVALID_TOKEN = "invalid_token"
    REVOKED = "revoked"


# Denials that must look exactly like a missing resource to the caller.
_HIDDEN_REASONS = frozenset({DenialReason.NOT_FOUND, DenialReason.INVALID_TOKEN})


@dataclass(frozen=True)
class AccessResult:
    """Outcome of an access check.

    Exactly one of ``mode`` (allowed) or ``reason`` (denied) is set.
    """

    allowed: bool
    mode: AccessMode | None = None
    reason: DenialReason | None = None

    def __post_init__(self) -> None:
        if self.allowed and (self.mode is None or self.reason is not None):
            raise InvalidArgumentError("An allowed result needs a mode and no reason")
        if not self.allowed and (self.reason is None or self.mode is not None):
            raise InvalidArgumentError("A denied result needs a reason and no mode")

    @property
    def status_code(self) -> int:
        """HTTP status a handler should answer with."""
        if self.allowed:
            return 200
        if self.reason in _HIDDEN_REASONS:
            return 404
        if self.reason is DenialReason.LOGIN_REQUIRED:
            return 401
        return 403


@dataclass(frozen=True)
class TokenAccessResult(AccessResult):
    """Result of a post share-link lookup. Carries only public-safe fields."""

    slug: str | None = None
    title: str | None = None


@dataclass(frozen=True)
class CategoryTokenAccessResult(AccessResult):
    """Result of a category share-link lookup.

    The caller expands the subtree; the resolver only reports the root
    and whether subcategories are included.
    """

    category_id: str | None = None
    category_name: str | None = None
    category_slug_path: list[str] = field(default_factory=list)
    category_name_path: str | None = None
    include_subcategories: bool = False


def allow(mode: AccessMode) -> AccessResult:
    return AccessResult(allowed=True, mode=mode)


def deny(reason: DenialReason) -> AccessResult:
    return AccessResult(allowed=False, reason=reason)
