"""AccessConfig — startup configuration for access decisions."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from funcsikk.context import Authenticated

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True)
class AccessConfig:
    """Site-wide access settings, built once and passed to the resolver."""

    admin_github_id: str | None = None
    """Provider account id of the site administrator."""

    admin_emails: frozenset[str] = field(default_factory=frozenset)
    """Additional administrator emails, lowercase."""

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "admin_emails",
            frozenset(e.strip().lower() for e in self.admin_emails if e.strip()),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AccessConfig:
        """Read ``ADMIN_GITHUB_ID`` and comma-separated ``ADMIN_EMAILS``."""
        env = os.environ if environ is None else environ
        emails = env.get("ADMIN_EMAILS", "")
        return cls(
            admin_github_id=env.get("ADMIN_GITHUB_ID") or None,
            admin_emails=frozenset(emails.split(",")) if emails else frozenset(),
        )

    def is_admin(self, email: str | None, provider_account_id: str | None) -> bool:
        if (
            self.admin_github_id is not None
            and provider_account_id is not None
            and provider_account_id == self.admin_github_id
        ):
            return True
        return email is not None and email.strip().lower() in self.admin_emails

    def context_for(
        self,
        user_id: str,
        email: str | None = None,
        provider_account_id: str | None = None,
    ) -> Authenticated:
        """Build an authenticated context with ``is_admin`` derived from config."""
        return Authenticated(
            user_id=user_id,
            email=email,
            is_admin=self.is_admin(email, provider_account_id),
        )
