"""AccessResolver — decides who may read a Sikk post or category.

Checks run in a fixed order and the first grant or definitive denial
wins.  The order decides who gets access, so do not reorder:

1. post not found            -> deny ``not_found``
2. admin                     -> allow ``admin``
3. post public token         -> allow ``public_token`` / deny ``expired``
4. post invitation           -> allow ``invited`` / deny ``expired``
5. first category in the chain with share settings, same checks as 3-4
6. legacy ``is_public`` flag (only with no post or category share settings)
7. deny ``login_required`` (anonymous) or ``not_invited``

Denials are returned, never raised.  Only caller misuse
(``InvalidArgumentError``) and store failures (``StoreUnavailableError``)
propagate.
"""

from __future__ import annotations

import hmac
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from funcsikk.access.tokens import is_valid_token_format
from funcsikk.access.types import (
    AccessMode,
    AccessResult,
    CategoryTokenAccessResult,
    DenialReason,
    TokenAccessResult,
    allow,
    deny,
)
from funcsikk.config import AccessConfig
from funcsikk.context import Anonymous, Authenticated
from funcsikk.exceptions import InvalidArgumentError, StoreUnavailableError
from funcsikk.models import (
    CategoryShare,
    CategoryShareInvitation,
    InvitationStatus,
    PostShareInvitation,
)
from funcsikk.store import ContentStore
from funcsikk.utils import is_expired, split_category_path

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from funcsikk.context import RequestContext
    from funcsikk.models import InvitationBase, ShareConfigBase

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _tokens_match(stored: str | None, presented: str) -> bool:
    if stored is None:
        return False
    return hmac.compare_digest(stored.encode(), presented.encode())


class AccessResolver:
    """Resolves post and category access for a request context.

    Stateless per call: the session is passed in, the clock is read once
    per resolution.  The only write is the pending -> accepted invitation
    transition, and its failure never changes the decision.  The caller
    owns the transaction and commits it.
    """

    def __init__(
        self,
        store: ContentStore | None = None,
        config: AccessConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store or ContentStore()
        self._config = config or AccessConfig()
        self._clock = clock

    @property
    def config(self) -> AccessConfig:
        return self._config

    def _now(self) -> datetime:
        now = self._clock()
        return now if now.tzinfo is not None else now.replace(tzinfo=UTC)

    # ------------------------------------------------------------------
    # Slug-based access
    # ------------------------------------------------------------------

    async def resolve_post_access(
        self,
        session: AsyncSession,
        slug: str,
        context: RequestContext,
        public_token: str | None = None,
    ) -> AccessResult:
        """Decide whether *context* may read the post at *slug*.

        *public_token* is the token the requester presented (e.g. from a
        share URL), matched against the tokens stored on the post and its
        categories.
        """
        if not isinstance(slug, str) or not slug.strip():
            raise InvalidArgumentError("slug is required")
        if not isinstance(context, (Anonymous, Authenticated)):
            raise InvalidArgumentError(f"Unsupported request context: {context!r}")

        # 1. Not found
        post = await self._store.get_post(session, slug)
        if post is None:
            return deny(DenialReason.NOT_FOUND)

        # 2. Admin override
        if isinstance(context, Authenticated) and context.is_admin:
            return allow(AccessMode.ADMIN)

        now = self._now()

        # 3-4. The post's own share settings
        share = await self._store.get_post_share(session, post.id)
        if share is not None:
            result = await self._check_share(
                session, share, PostShareInvitation, context, public_token, now
            )
            if result is not None:
                return result

        # 5. First category in the chain with share settings decides
        category_has_share_settings = False
        chain = await self._store.get_category_chain(session, post.category)
        path_depth = len(split_category_path(post.category))
        for depth, category in enumerate(chain):
            category_share = await self._store.get_category_share(session, category.id)
            if category_share is None:
                continue
            category_has_share_settings = True
            # Leaf is measured against the post's full path, not the resolved prefix
            is_leaf = depth == path_depth - 1
            if is_leaf or category_share.include_subcategories:
                result = await self._check_share(
                    session,
                    category_share,
                    CategoryShareInvitation,
                    context,
                    public_token,
                    now,
                )
                if result is not None:
                    return result
            break

        # 6. Legacy public flag
        if post.is_public and share is None and not category_has_share_settings:
            return allow(AccessMode.PUBLIC_TOKEN)

        # 7. Final denial
        if isinstance(context, Anonymous):
            return deny(DenialReason.LOGIN_REQUIRED)
        return deny(DenialReason.NOT_INVITED)

    async def _check_share(
        self,
        session: AsyncSession,
        share: ShareConfigBase,
        invitation_model: type[InvitationBase],
        context: RequestContext,
        public_token: str | None,
        now: datetime,
    ) -> AccessResult | None:
        """Apply the public-token then invitation checks to one share.

        Returns None when neither grant source matches.
        """
        if (
            public_token
            and share.public_enabled
            and _tokens_match(share.public_token, public_token)
        ):
            if is_expired(share.public_expires_at, now):
                return deny(DenialReason.EXPIRED)
            return allow(AccessMode.PUBLIC_TOKEN)

        if not isinstance(context, Authenticated) or not context.email:
            return None

        invitation = await self._store.find_invitation(
            session, invitation_model, share.id, context.email
        )
        if invitation is None or invitation.status == InvitationStatus.REVOKED:
            return None
        if is_expired(invitation.expires_at, now):
            return deny(DenialReason.EXPIRED)

        if invitation.status == InvitationStatus.PENDING:
            try:
                await self._store.accept_invitation(session, invitation, context.user_id, now)
            except StoreUnavailableError:
                logger.warning(
                    "Failed to mark invitation %s accepted; granting access anyway",
                    invitation.id,
                    exc_info=True,
                )
        return allow(AccessMode.INVITED)

    # ------------------------------------------------------------------
    # Token-only share links
    # ------------------------------------------------------------------

    @staticmethod
    def _require_token(token: str | None) -> str:
        if not isinstance(token, str) or not token:
            raise InvalidArgumentError("token is required")
        return token

    async def resolve_post_access_by_token(
        self, session: AsyncSession, token: str
    ) -> TokenAccessResult:
        """Resolve an anonymous post share link.

        Malformed tokens are rejected before any lookup.  A disabled share
        reports ``not_found`` like a token that never existed.
        """
        token = self._require_token(token)
        if not is_valid_token_format(token):
            return TokenAccessResult(allowed=False, reason=DenialReason.INVALID_TOKEN)

        share = await self._store.get_post_share_by_token(session, token)
        if share is None or not share.public_enabled:
            return TokenAccessResult(allowed=False, reason=DenialReason.NOT_FOUND)
        if is_expired(share.public_expires_at, self._now()):
            return TokenAccessResult(allowed=False, reason=DenialReason.EXPIRED)

        post = await self._store.get_post_by_id(session, share.post_id)
        if post is None:
            logger.warning("Post share %s points at missing post %s", share.id, share.post_id)
            return TokenAccessResult(allowed=False, reason=DenialReason.NOT_FOUND)

        logger.debug("Share link granted for post %s", post.slug)
        return TokenAccessResult(
            allowed=True,
            mode=AccessMode.PUBLIC_TOKEN,
            slug=post.slug,
            title=post.title,
        )

    async def resolve_category_access_by_token(
        self, session: AsyncSession, token: str
    ) -> CategoryTokenAccessResult:
        """Resolve an anonymous category share link.

        Reports the shared category's slug path and whether its subtree is
        included; expanding the subtree is left to the caller.
        """
        token = self._require_token(token)
        if not is_valid_token_format(token):
            return CategoryTokenAccessResult(allowed=False, reason=DenialReason.INVALID_TOKEN)

        share: CategoryShare | None = await self._store.get_category_share_by_token(
            session, token
        )
        if share is None or not share.public_enabled:
            return CategoryTokenAccessResult(allowed=False, reason=DenialReason.NOT_FOUND)
        if is_expired(share.public_expires_at, self._now()):
            return CategoryTokenAccessResult(allowed=False, reason=DenialReason.EXPIRED)

        category = await self._store.get_category(session, share.category_id)
        if category is None:
            logger.warning(
                "Category share %s points at missing category %s", share.id, share.category_id
            )
            return CategoryTokenAccessResult(allowed=False, reason=DenialReason.NOT_FOUND)

        lineage = await self._store.get_category_ancestry(session, category)
        logger.debug("Share link granted for category %s", category.id)
        return CategoryTokenAccessResult(
            allowed=True,
            mode=AccessMode.PUBLIC_TOKEN,
            category_id=category.id,
            category_name=category.name,
            category_slug_path=[c.slug for c in lineage],
            category_name_path="/".join(c.name for c in lineage),
            include_subcategories=share.include_subcategories,
        )
