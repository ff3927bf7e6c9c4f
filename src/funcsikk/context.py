"""Request contexts: who is asking.

A context is either ``Anonymous`` or ``Authenticated``.  Check with
``isinstance`` rather than probing optional fields.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Anonymous:
    """No session."""


@dataclass(frozen=True, slots=True)
class Authenticated:
    """A signed-in principal.

    Attributes:
        user_id: Stable user identifier from the auth provider.
        email: Verified email, if the provider supplied one.
        is_admin: Whether the principal administers the site.
    """

    user_id: str
    email: str | None = None
    is_admin: bool = False


RequestContext = Anonymous | Authenticated

ANONYMOUS = Anonymous()
