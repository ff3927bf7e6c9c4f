"""InvitationService — per-email grants on a share.

Parameterised by the concrete invitation model so one service handles
both post and category shares.  Flushes but does not commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from funcsikk.exceptions import InvalidArgumentError, StoreUnavailableError
from funcsikk.models import InvitationStatus
from funcsikk.store import ContentStore
from funcsikk.utils import is_valid_email, normalize_email

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from funcsikk.models import InvitationBase

    UserLookup = Callable[[AsyncSession, str], Awaitable[str | None]]

logger = logging.getLogger(__name__)


@dataclass
class InviteError:
    """An email that could not be invited."""

    email: str
    message: str


@dataclass
class InviteResult:
    """Result of an invite operation."""

    success: bool
    message: str
    invitations: list[InvitationBase] = field(default_factory=list)
    errors: list[InviteError] = field(default_factory=list)


class InvitationService:
    """Creates, lists, revokes and removes invitations on a share."""

    def __init__(
        self,
        invitation_model: type[InvitationBase],
        store: ContentStore | None = None,
        *,
        user_lookup: UserLookup | None = None,
    ) -> None:
        self._model = invitation_model
        self._store = store or ContentStore()
        self._user_lookup = user_lookup

    async def invite(
        self,
        session: AsyncSession,
        share_id: str,
        emails: Iterable[str],
        *,
        expires_at: datetime | None = None,
    ) -> InviteResult:
        """Invite each valid email, upserting on ``(share_id, email)``.

        Re-inviting resets the invitation to pending, clears
        ``accepted_at`` and replaces the expiry.  Invalid emails are
        dropped; raises ``InvalidArgumentError`` if none remain.
        """
        valid: list[str] = []
        for email in emails:
            if not isinstance(email, str) or not is_valid_email(email):
                continue
            normalized = normalize_email(email)
            if normalized not in valid:
                valid.append(normalized)
        if not valid:
            raise InvalidArgumentError("No valid emails provided")

        invitations: list[InvitationBase] = []
        errors: list[InviteError] = []
        for email in valid:
            try:
                invitation = await self._upsert(session, share_id, email, expires_at)
            except (SQLAlchemyError, StoreUnavailableError) as e:
                logger.error("Failed to invite %s to share %s: %s", email, share_id, e)
                errors.append(InviteError(email=email, message="Failed to create invitation"))
                continue
            invitations.append(invitation)

        return InviteResult(
            success=not errors,
            message=f"Invited {len(invitations)} of {len(valid)} email(s)",
            invitations=invitations,
            errors=errors,
        )

    async def _upsert(
        self,
        session: AsyncSession,
        share_id: str,
        email: str,
        expires_at: datetime | None,
    ) -> InvitationBase:
        existing = await self._store.find_invitation(session, self._model, share_id, email)
        async with session.begin_nested():
            if existing is not None:
                existing.status = InvitationStatus.PENDING.value
                existing.expires_at = expires_at
                existing.accepted_at = None
                session.add(existing)
                return existing

            user_id = None
            if self._user_lookup is not None:
                user_id = await self._user_lookup(session, email)
            invitation = self._model(
                share_id=share_id,
                email=email,
                user_id=user_id,
                expires_at=expires_at,
                invited_at=datetime.now(UTC),
            )
            session.add(invitation)
            return invitation

    async def list_invitations(
        self, session: AsyncSession, share_id: str
    ) -> list[InvitationBase]:
        return await self._store.list_invitations(session, self._model, share_id)

    async def revoke_invitation(
        self, session: AsyncSession, share_id: str, email: str
    ) -> bool:
        """Mark an invitation revoked. Returns True if found."""
        invitation = await self._store.find_invitation(session, self._model, share_id, email)
        if invitation is None:
            return False
        invitation.status = InvitationStatus.REVOKED.value
        session.add(invitation)
        await self._flush(session)
        return True

    async def remove_invitation(
        self, session: AsyncSession, share_id: str, email: str
    ) -> bool:
        """Delete an invitation by email. Returns True if found."""
        invitation = await self._store.find_invitation(session, self._model, share_id, email)
        if invitation is None:
            return False
        await session.delete(invitation)
        await self._flush(session)
        return True

    async def remove_all(self, session: AsyncSession, share_id: str) -> int:
        """Delete every invitation on a share. Returns the number removed."""
        invitations = await self.list_invitations(session, share_id)
        for invitation in invitations:
            await session.delete(invitation)
        if invitations:
            await self._flush(session)
        return len(invitations)

    @staticmethod
    async def _flush(session: AsyncSession) -> None:
        try:
            await session.flush()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to write invitations: {e}") from e
