"""Admin-side share settings and invitation management."""

from funcsikk.sharing.invitations import InvitationService, InviteError, InviteResult
from funcsikk.sharing.settings import UNSET, ShareSettings, ShareSettingsService

__all__ = [
    "UNSET",
    "InvitationService",
    "InviteError",
    "InviteResult",
    "ShareSettings",
    "ShareSettingsService",
]
