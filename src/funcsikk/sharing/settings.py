"""ShareSettingsService — admin management of post and category sharing.

Share settings are created lazily on the first write and deleted, with
their invitations, when sharing is disabled.  Flushes but does not commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from funcsikk.access.tokens import generate_share_token
from funcsikk.exceptions import ContentNotFoundError, StoreUnavailableError
from funcsikk.models import (
    CategoryShare,
    CategoryShareInvitation,
    InvitationStatus,
    PostShare,
    PostShareInvitation,
    SikkCategory,
    SikkPost,
)
from funcsikk.sharing.invitations import InvitationService
from funcsikk.store import ContentStore
from funcsikk.utils import normalize_email

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from funcsikk.models import InvitationBase, ShareConfigBase
    from funcsikk.sharing.invitations import InviteResult, UserLookup

logger = logging.getLogger(__name__)

UNSET: Any = object()
"""Sentinel for "leave unchanged", distinct from ``None`` (clear)."""

_TOKEN_ATTEMPTS = 10


@dataclass
class ShareSettings:
    """A share configuration together with its invitations."""

    share: ShareConfigBase
    invitations: list[InvitationBase] = field(default_factory=list)


class ShareSettingsService:
    """Reads and writes share settings for posts and categories."""

    def __init__(
        self,
        store: ContentStore | None = None,
        *,
        token_factory: Callable[[], str] = generate_share_token,
        user_lookup: UserLookup | None = None,
    ) -> None:
        self._store = store or ContentStore()
        self._token_factory = token_factory
        self._post_invitations = InvitationService(
            PostShareInvitation, self._store, user_lookup=user_lookup
        )
        self._category_invitations = InvitationService(
            CategoryShareInvitation, self._store, user_lookup=user_lookup
        )

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _flush(session: AsyncSession) -> None:
        try:
            await session.flush()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to write share settings: {e}") from e

    async def _mint_token(self, session: AsyncSession) -> str:
        """Generate a token unused by any post or category share."""
        for _ in range(_TOKEN_ATTEMPTS):
            candidate = self._token_factory()
            if (
                await self._store.get_post_share_by_token(session, candidate) is None
                and await self._store.get_category_share_by_token(session, candidate) is None
            ):
                return candidate
        raise StoreUnavailableError("Unable to generate a unique share token")

    async def _apply_settings(
        self,
        session: AsyncSession,
        share: ShareConfigBase,
        *,
        public_enabled: bool | None,
        public_expires_at: datetime | None,
        regenerate_token: bool,
    ) -> None:
        if public_enabled is not None:
            share.public_enabled = public_enabled
        if public_expires_at is not UNSET:
            share.public_expires_at = public_expires_at
        if regenerate_token or (share.public_enabled and not share.public_token):
            share.public_token = await self._mint_token(session)
        share.updated_at = datetime.now(UTC)
        session.add(share)
        await self._flush(session)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def _require_post(self, session: AsyncSession, slug: str) -> SikkPost:
        post = await self._store.get_post(session, slug)
        if post is None:
            raise ContentNotFoundError(f"Post not found: {slug}")
        return post

    async def _ensure_post_share(self, session: AsyncSession, post: SikkPost) -> PostShare:
        share = await self._store.get_post_share(session, post.id)
        if share is None:
            share = PostShare(post_id=post.id, public_enabled=False)
            session.add(share)
            await self._flush(session)
        return share

    async def get_post_share_settings(
        self, session: AsyncSession, slug: str
    ) -> ShareSettings | None:
        """Return the post's share settings, or None if it has never been shared."""
        post = await self._require_post(session, slug)
        share = await self._store.get_post_share(session, post.id)
        if share is None:
            return None
        invitations = await self._post_invitations.list_invitations(session, share.id)
        return ShareSettings(share=share, invitations=invitations)

    async def update_post_share_settings(
        self,
        session: AsyncSession,
        slug: str,
        *,
        public_enabled: bool | None = None,
        public_expires_at: datetime | None = UNSET,
        regenerate_token: bool = False,
    ) -> PostShare:
        """Create or update the post's public-link settings.

        A token is minted when *regenerate_token* is set or when public
        access is enabled on a share that has none yet.
        """
        post = await self._require_post(session, slug)
        share = await self._ensure_post_share(session, post)
        await self._apply_settings(
            session,
            share,
            public_enabled=public_enabled,
            public_expires_at=public_expires_at,
            regenerate_token=regenerate_token,
        )
        logger.info("Updated share settings for post %s", slug)
        return share

    async def disable_post_sharing(self, session: AsyncSession, slug: str) -> bool:
        """Delete the post's share settings and invitations. Returns True if any existed."""
        post = await self._require_post(session, slug)
        share = await self._store.get_post_share(session, post.id)
        if share is None:
            return False
        await self._post_invitations.remove_all(session, share.id)
        await session.delete(share)
        await self._flush(session)
        logger.info("Disabled sharing for post %s", slug)
        return True

    async def invite_to_post(
        self,
        session: AsyncSession,
        slug: str,
        emails: Iterable[str],
        *,
        expires_at: datetime | None = None,
    ) -> InviteResult:
        post = await self._require_post(session, slug)
        share = await self._ensure_post_share(session, post)
        return await self._post_invitations.invite(
            session, share.id, emails, expires_at=expires_at
        )

    async def revoke_post_invitation(
        self, session: AsyncSession, slug: str, email: str
    ) -> bool:
        post = await self._require_post(session, slug)
        share = await self._store.get_post_share(session, post.id)
        if share is None:
            return False
        return await self._post_invitations.revoke_invitation(session, share.id, email)

    async def remove_post_invitation(
        self, session: AsyncSession, slug: str, email: str
    ) -> bool:
        post = await self._require_post(session, slug)
        share = await self._store.get_post_share(session, post.id)
        if share is None:
            return False
        return await self._post_invitations.remove_invitation(session, share.id, email)

    async def list_invited_posts(
        self,
        session: AsyncSession,
        email: str,
        *,
        now: datetime | None = None,
    ) -> list[SikkPost]:
        """Posts *email* holds a live (not revoked, not expired) invitation to."""
        now = now or datetime.now(UTC)
        inv = PostShareInvitation
        query = (
            select(SikkPost)
            .join(PostShare, PostShare.post_id == SikkPost.id)  # type: ignore[arg-type]
            .join(inv, inv.share_id == PostShare.id)  # type: ignore[arg-type]
            .where(
                func.lower(inv.email) == normalize_email(email),
                inv.status != InvitationStatus.REVOKED.value,
                or_(inv.expires_at.is_(None), inv.expires_at > now),  # type: ignore[union-attr,operator]
            )
            .order_by(SikkPost.created_at.desc())  # type: ignore[attr-defined]
        )
        try:
            result = await session.execute(query)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Content store query failed: {e}") from e
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def _require_category(
        self, session: AsyncSession, slug_path: str | list[str]
    ) -> SikkCategory:
        category = await self._store.get_category_by_slug_path(session, slug_path)
        if category is None:
            raise ContentNotFoundError(f"Category not found: {slug_path}")
        return category

    async def _ensure_category_share(
        self, session: AsyncSession, category: SikkCategory
    ) -> CategoryShare:
        share = await self._store.get_category_share(session, category.id)
        if share is None:
            share = CategoryShare(category_id=category.id, public_enabled=False)
            session.add(share)
            await self._flush(session)
        return share

    async def get_category_share_settings(
        self, session: AsyncSession, slug_path: str | list[str]
    ) -> ShareSettings | None:
        category = await self._require_category(session, slug_path)
        share = await self._store.get_category_share(session, category.id)
        if share is None:
            return None
        invitations = await self._category_invitations.list_invitations(session, share.id)
        return ShareSettings(share=share, invitations=invitations)

    async def update_category_share_settings(
        self,
        session: AsyncSession,
        slug_path: str | list[str],
        *,
        public_enabled: bool | None = None,
        public_expires_at: datetime | None = UNSET,
        regenerate_token: bool = False,
        include_subcategories: bool | None = None,
    ) -> CategoryShare:
        """Create or update a category's public-link settings."""
        category = await self._require_category(session, slug_path)
        share = await self._ensure_category_share(session, category)
        if include_subcategories is not None:
            share.include_subcategories = include_subcategories
        await self._apply_settings(
            session,
            share,
            public_enabled=public_enabled,
            public_expires_at=public_expires_at,
            regenerate_token=regenerate_token,
        )
        logger.info("Updated share settings for category %s", category.id)
        return share

    async def disable_category_sharing(
        self, session: AsyncSession, slug_path: str | list[str]
    ) -> bool:
        category = await self._require_category(session, slug_path)
        share = await self._store.get_category_share(session, category.id)
        if share is None:
            return False
        await self._category_invitations.remove_all(session, share.id)
        await session.delete(share)
        await self._flush(session)
        logger.info("Disabled sharing for category %s", category.id)
        return True

    async def invite_to_category(
        self,
        session: AsyncSession,
        slug_path: str | list[str],
        emails: Iterable[str],
        *,
        expires_at: datetime | None = None,
    ) -> InviteResult:
        category = await self._require_category(session, slug_path)
        share = await self._ensure_category_share(session, category)
        return await self._category_invitations.invite(
            session, share.id, emails, expires_at=expires_at
        )

    async def revoke_category_invitation(
        self, session: AsyncSession, slug_path: str | list[str], email: str
    ) -> bool:
        category = await self._require_category(session, slug_path)
        share = await self._store.get_category_share(session, category.id)
        if share is None:
            return False
        return await self._category_invitations.revoke_invitation(session, share.id, email)

    async def remove_category_invitation(
        self, session: AsyncSession, slug_path: str | list[str], email: str
    ) -> bool:
        category = await self._require_category(session, slug_path)
        share = await self._store.get_category_share(session, category.id)
        if share is None:
            return False
        return await self._category_invitations.remove_invitation(session, share.id, email)
