"""The caller identity handed to the service layer.

Authentication (SimpleJWT or Auth0) happens at the edge; services only ever
see a ``Principal``.  ``subject`` is the opaque external identity that a
``Customer`` row links to, ``is_privileged`` marks staff and system callers
that bypass ownership checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings


@dataclass(frozen=True)
class Principal:
    """Immutable caller identity."""

    subject: Optional[str] = None
    is_privileged: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.is_privileged or bool(self.subject)

    @classmethod
    def anonymous(cls) -> Principal:
        return cls()

    @classmethod
    def system(cls) -> Principal:
        """In-process caller (workers, management commands, admin actions)."""
        return cls(subject=None, is_privileged=True)

    @classmethod
    def from_user(cls, user: Any) -> Principal:
        """Build a principal from ``request.user``.

        Supports Django users (SimpleJWT / session) and ``Auth0User``.
        """
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.anonymous()

        sub = getattr(user, "sub", None)
        if sub is not None:
            permissions = getattr(user, "permissions", []) or []
            return cls(
                subject=sub,
                is_privileged=settings.AUTH0_ADMIN_PERMISSION in permissions,
            )

        return cls(
            subject=str(user.pk),
            is_privileged=bool(getattr(user, "is_staff", False)),
        )

    def __str__(self) -> str:
        if self.subject is None:
            return "system" if self.is_privileged else "anonymous"
        return self.subject
