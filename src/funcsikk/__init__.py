"""funcsikk: access control for the Sikk study-notes section.

Decides who may read a post or category (admin, share link, email
invitation, category-level sharing, legacy public flag) and manages the
share settings behind those decisions.
"""

__version__ = "0.1.0"

from funcsikk.access import (
    ANONYMOUS,
    AccessMode,
    AccessResolver,
    AccessResult,
    Anonymous,
    Authenticated,
    CategoryTokenAccessResult,
    DenialReason,
    RequestContext,
    TokenAccessResult,
    generate_share_token,
    is_valid_token_format,
)
from funcsikk.config import AccessConfig
from funcsikk.exceptions import (
    ContentNotFoundError,
    InvalidArgumentError,
    SikkError,
    StoreUnavailableError,
)
from funcsikk.sharing import (
    UNSET,
    InvitationService,
    InviteError,
    InviteResult,
    ShareSettings,
    ShareSettingsService,
)
from funcsikk.store import ContentStore
from funcsikk.utils import post_in_shared_category

__all__ = [
    "ANONYMOUS",
    "UNSET",
    "AccessConfig",
    "AccessMode",
    "AccessResolver",
    "AccessResult",
    "Anonymous",
    "Authenticated",
    "CategoryTokenAccessResult",
    "ContentNotFoundError",
    "ContentStore",
    "DenialReason",
    "InvalidArgumentError",
    "InvitationService",
    "InviteError",
    "InviteResult",
    "RequestContext",
    "ShareSettings",
    "ShareSettingsService",
    "SikkError",
    "StoreUnavailableError",
    "TokenAccessResult",
    "__version__",
    "generate_share_token",
    "is_valid_token_format",
    "post_in_shared_category",
]
