"""SQLModel database models for funcsikk."""

from funcsikk.models.categories import SikkCategory
from funcsikk.models.posts import SikkPost
from funcsikk.models.shares import (
    CategoryShare,
    CategoryShareInvitation,
    InvitationBase,
    InvitationStatus,
    PostShare,
    PostShareInvitation,
    ShareConfigBase,
)

__all__ = [
    "CategoryShare",
    "CategoryShareInvitation",
    "InvitationBase",
    "InvitationStatus",
    "PostShare",
    "PostShareInvitation",
    "ShareConfigBase",
    "SikkCategory",
    "SikkPost",
]
