"""ContentStore — read access to posts, categories and their share settings.

Stateless: receives a session at call time.  Every SQLAlchemy failure
is re-raised as ``StoreUnavailableError`` so callers deal with a single
infrastructure error type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from funcsikk.exceptions import StoreUnavailableError
from funcsikk.models import (
    CategoryShare,
    InvitationStatus,
    PostShare,
    SikkCategory,
    SikkPost,
)
from funcsikk.utils import normalize_email, split_category_path

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

    from funcsikk.models import InvitationBase

logger = logging.getLogger(__name__)


class ContentStore:
    """Lookups the access resolver and admin services are built on."""

    @staticmethod
    async def _execute(session: AsyncSession, statement: Any) -> Any:
        try:
            return await session.execute(statement)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Content store query failed: {e}") from e

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def get_post(self, session: AsyncSession, slug: str) -> SikkPost | None:
        result = await self._execute(session, select(SikkPost).where(SikkPost.slug == slug))
        return result.scalar_one_or_none()

    async def get_post_by_id(self, session: AsyncSession, post_id: str) -> SikkPost | None:
        result = await self._execute(session, select(SikkPost).where(SikkPost.id == post_id))
        return result.scalar_one_or_none()

    async def get_post_share(self, session: AsyncSession, post_id: str) -> PostShare | None:
        result = await self._execute(
            session, select(PostShare).where(PostShare.post_id == post_id)
        )
        return result.scalar_one_or_none()

    async def get_post_share_by_token(
        self, session: AsyncSession, token: str
    ) -> PostShare | None:
        result = await self._execute(
            session, select(PostShare).where(PostShare.public_token == token)
        )
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def get_category(
        self, session: AsyncSession, category_id: str
    ) -> SikkCategory | None:
        result = await self._execute(
            session, select(SikkCategory).where(SikkCategory.id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_category_share(
        self, session: AsyncSession, category_id: str
    ) -> CategoryShare | None:
        result = await self._execute(
            session, select(CategoryShare).where(CategoryShare.category_id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_category_share_by_token(
        self, session: AsyncSession, token: str
    ) -> CategoryShare | None:
        result = await self._execute(
            session, select(CategoryShare).where(CategoryShare.public_token == token)
        )
        return result.scalar_one_or_none()

    async def _find_child(
        self,
        session: AsyncSession,
        parent_id: str | None,
        column: Any,
        value: str,
    ) -> SikkCategory | None:
        query = select(SikkCategory).where(column == value)
        if parent_id is None:
            query = query.where(SikkCategory.parent_id.is_(None))  # type: ignore[union-attr]
        else:
            query = query.where(SikkCategory.parent_id == parent_id)
        query = query.order_by(SikkCategory.order).limit(1)  # type: ignore[arg-type]
        result = await self._execute(session, query)
        return result.scalars().first()

    async def get_category_chain(
        self, session: AsyncSession, path: str | None
    ) -> list[SikkCategory]:
        """Resolve a '/'-joined names path to categories, root first.

        Stops at the first segment with no matching category, so the
        result may be a prefix of the requested path.
        """
        chain: list[SikkCategory] = []
        parent_id: str | None = None
        for name in split_category_path(path):
            category = await self._find_child(session, parent_id, SikkCategory.name, name)
            if category is None:
                break
            chain.append(category)
            parent_id = category.id
        return chain

    async def get_category_by_slug_path(
        self, session: AsyncSession, slug_path: str | list[str]
    ) -> SikkCategory | None:
        """Resolve a slug path like ``["ctf", "web"]`` to the leaf category."""
        slugs = split_category_path(slug_path)
        if not slugs:
            return None
        category: SikkCategory | None = None
        for slug in slugs:
            category = await self._find_child(
                session, category.id if category else None, SikkCategory.slug, slug
            )
            if category is None:
                return None
        return category

    async def get_category_ancestry(
        self, session: AsyncSession, category: SikkCategory
    ) -> list[SikkCategory]:
        """Return *category* and its ancestors, root first."""
        lineage = [category]
        seen = {category.id}
        parent_id = category.parent_id
        while parent_id is not None and parent_id not in seen:
            parent = await self.get_category(session, parent_id)
            if parent is None:
                break
            lineage.append(parent)
            seen.add(parent.id)
            parent_id = parent.parent_id
        if parent_id is not None and parent_id in seen:
            logger.warning("Category cycle detected at %s", parent_id)
        lineage.reverse()
        return lineage

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    async def list_invitations(
        self,
        session: AsyncSession,
        invitation_model: type[InvitationBase],
        share_id: str,
    ) -> list[InvitationBase]:
        """All invitations on a share, most recently invited first."""
        model = invitation_model
        result = await self._execute(
            session,
            select(model)
            .where(model.share_id == share_id)
            .order_by(model.invited_at.desc()),  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def find_invitation(
        self,
        session: AsyncSession,
        invitation_model: type[InvitationBase],
        share_id: str,
        email: str,
    ) -> InvitationBase | None:
        """Case-insensitive lookup of the invitation for *email* on a share."""
        model = invitation_model
        result = await self._execute(
            session,
            select(model).where(
                model.share_id == share_id,
                func.lower(model.email) == normalize_email(email),
            ),
        )
        return result.scalars().first()

    async def accept_invitation(
        self,
        session: AsyncSession,
        invitation: InvitationBase,
        user_id: str,
        now: datetime,
    ) -> bool:
        """Move a pending invitation to accepted and bind *user_id*.

        Returns False without writing when the invitation is not pending.
        The write runs in a SAVEPOINT so a failure leaves the outer
        transaction usable.
        """
        if invitation.status != InvitationStatus.PENDING:
            return False
        try:
            async with session.begin_nested():
                invitation.status = InvitationStatus.ACCEPTED.value
                invitation.accepted_at = now
                invitation.user_id = user_id
                session.add(invitation)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to accept invitation: {e}") from e
        return True
