"""Access resolution for Sikk posts and categories."""

from funcsikk.context import ANONYMOUS, Anonymous, Authenticated, RequestContext
from funcsikk.access.resolver import AccessResolver
from funcsikk.access.tokens import generate_share_token, is_valid_token_format
from funcsikk.access.types import (
    AccessMode,
    AccessResult,
    CategoryTokenAccessResult,
    DenialReason,
    TokenAccessResult,
)

__all__ = [
    "ANONYMOUS",
    "AccessMode",
    "AccessResolver",
    "AccessResult",
    "Anonymous",
    "Authenticated",
    "CategoryTokenAccessResult",
    "DenialReason",
    "RequestContext",
    "TokenAccessResult",
    "generate_share_token",
    "is_valid_token_format",
]
