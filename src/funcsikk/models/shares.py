"""Share configuration and invitation models.

``ShareConfigBase`` and ``InvitationBase`` are non-table bases shared by
post-level and category-level sharing; the concrete tables add the owner
key.  Invitations are unique per ``(share_id, email)``.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class InvitationStatus(str, Enum):
    """Lifecycle of an invitation. ``REVOKED`` is terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REVOKED = "revoked"


class ShareConfigBase(SQLModel):
    """Public-link settings. Subclass with ``table=True`` for a concrete table."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    public_enabled: bool = Field(default=False)
    public_token: str | None = Field(default=None, index=True, unique=True)
    public_expires_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class PostShare(ShareConfigBase, table=True):
    """Share settings for a single post — ``sikk_post_shares``."""

    __tablename__ = "sikk_post_shares"

    post_id: str = Field(foreign_key="sikk_posts.id", index=True, unique=True)


class CategoryShare(ShareConfigBase, table=True):
    """Share settings for a category subtree — ``sikk_category_shares``."""

    __tablename__ = "sikk_category_shares"

    category_id: str = Field(foreign_key="sikk_categories.id", index=True, unique=True)
    include_subcategories: bool = Field(default=True)


class InvitationBase(SQLModel):
    """Per-email grant on a share. Subclass with ``table=True`` for a concrete table."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    share_id: str = Field(index=True)
    email: str = Field(index=True)
    status: str = Field(default=InvitationStatus.PENDING.value)
    user_id: str | None = Field(default=None)
    invited_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    accepted_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    expires_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class PostShareInvitation(InvitationBase, table=True):
    """Invitation to a post share — ``sikk_post_share_invitations``."""

    __tablename__ = "sikk_post_share_invitations"
    __table_args__ = (UniqueConstraint("share_id", "email"),)


class CategoryShareInvitation(InvitationBase, table=True):
    """Invitation to a category share — ``sikk_category_share_invitations``."""

    __tablename__ = "sikk_category_share_invitations"
    __table_args__ = (UniqueConstraint("share_id", "email"),)
