"""Auth0 JWT Authentication backend for Django REST Framework.

Storefront customers sign in against the Auth0 tenant; the token ``sub``
claim is the opaque principal identity a ``Customer`` row links to, and the
``permissions`` claim carries the admin permission that makes a caller
privileged (see ``modules.core.principals``).

Uses PyJWT with RS256 verification against the tenant JWKS, cached by
``PyJWKClient``.  When the tenant is not configured, or the token was not
issued by it, the backend steps aside so SimpleJWT can try.

Security decisions
------------------
* **Fail Closed**: any decode / validation error on an Auth0 token is a 401.
* ``algorithms`` comes from configuration, never from the token header.
* Audience **and** issuer are always validated.
"""

from __future__ import annotations

from typing import Optional

import jwt as pyjwt
import structlog
from decouple import config
from jwt import PyJWKClient
from jwt.exceptions import PyJWTError

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = structlog.get_logger(__name__)

AUTH0_DOMAIN = config("AUTH0_DOMAIN", default="")
AUTH0_AUDIENCE = config("AUTH0_AUDIENCE", default="")
AUTH0_ALGORITHM = config("AUTH0_ALGORITHM", default="RS256")
AUTH0_JWKS_LIFESPAN = config("AUTH0_JWKS_LIFESPAN", default=300, cast=int)


def _build_jwks_client(domain: str) -> Optional[PyJWKClient]:
    if not domain:
        return None
    return PyJWKClient(
        f"https://{domain}/.well-known/jwks.json",
        cache_jwk_set=True,
        lifespan=AUTH0_JWKS_LIFESPAN,
    )


_ISSUER = f"https://{AUTH0_DOMAIN}/" if AUTH0_DOMAIN else ""
_jwks_client = _build_jwks_client(AUTH0_DOMAIN)
_AUTH0_ENABLED = bool(_jwks_client and AUTH0_AUDIENCE)


class Auth0User:
    """Request user for Auth0-authenticated callers.

    No local Django ``User`` row is required.
    """

    is_authenticated = True
    is_active = True
    is_staff = False

    def __init__(self, payload: dict):
        self.payload = payload
        self.sub: str = payload.get("sub", "")
        self.permissions: list[str] = list(payload.get("permissions", []))

    @property
    def pk(self) -> str:
        """Identity used by DRF user throttles."""
        return self.sub

    def __str__(self) -> str:
        return self.sub


class Auth0JSONWebTokenAuthentication(BaseAuthentication):
    """DRF authentication class that validates Auth0 Bearer tokens."""

    keyword = "Bearer"

    def authenticate(self, request):
        """Return ``(Auth0User, token)``, or ``None`` to defer to other backends."""
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header or not _AUTH0_ENABLED:
            return None

        token = self._extract_token(header)
        if self._unverified_issuer(token) != _ISSUER:
            return None

        user = Auth0User(self._decode_token(token))
        logger.info("auth.auth0_authenticated", sub=user.sub)
        return (user, token)

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'

    @classmethod
    def _extract_token(cls, header: str) -> str:
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != cls.keyword.lower():
            raise AuthenticationFailed("Invalid Authorization header format.")
        return parts[1]

    @staticmethod
    def _unverified_issuer(token: str) -> Optional[str]:
        try:
            claims = pyjwt.decode(token, options={"verify_signature": False})
        except PyJWTError:
            return None
        return claims.get("iss")

    @staticmethod
    def _decode_token(token: str) -> dict:
        if _jwks_client is None:
            raise AuthenticationFailed("Auth0 authentication is not configured.")
        try:
            signing_key = _jwks_client.get_signing_key_from_jwt(token)
            return pyjwt.decode(
                token,
                signing_key.key,
                algorithms=[AUTH0_ALGORITHM],
                audience=AUTH0_AUDIENCE,
                issuer=_ISSUER,
            )
        except PyJWTError as exc:
            logger.warning("auth.auth0_validation_failed", error=str(exc))
            raise AuthenticationFailed(f"Token validation failed: {exc}") from exc
