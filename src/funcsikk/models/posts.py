"""SikkPost model — study-notes posts addressed by slug."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class SikkPost(SQLModel, table=True):
    """A Sikk study-notes post.

    ``category`` is a '/'-joined path of category *names*, e.g. ``"CTF/Web"``.
    ``is_public`` is the legacy visibility flag that predates share settings.
    """

    __tablename__ = "sikk_posts"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    slug: str = Field(index=True, unique=True)
    title: str = Field(default="")
    description: str | None = Field(default=None)
    content: str = Field(default="")
    category: str | None = Field(default=None, index=True)
    is_public: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
