"""SikkCategory model — self-referential category tree."""

from __future__ import annotations

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class SikkCategory(SQLModel, table=True):
    """A node in the category tree. Roots have ``parent_id=None``."""

    __tablename__ = "sikk_categories"
    __table_args__ = (UniqueConstraint("parent_id", "slug"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    slug: str = Field(index=True)
    parent_id: str | None = Field(default=None, foreign_key="sikk_categories.id", index=True)
    order: int = Field(default=0)
