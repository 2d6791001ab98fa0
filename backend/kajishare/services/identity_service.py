"""Identity resolution: bearer token → ``UserIdentity``.

Google ID token verification is a thin PyJWT wrapper: the signing key comes
from Google's JWKS, and issuer/audience/expiry are checked by ``jwt.decode``.
Everything downstream only sees ``IdentityClaims`` and ``UserIdentity``.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import jwt
from jwt import PyJWKClient
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from kajishare.config import settings
from kajishare.errors import DomainError, ErrorKind
from kajishare.models.user import User

logger = logging.getLogger(__name__)

DEV_TOKEN_PREFIX = "test_"
_email_adapter = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class IdentityClaims:
    """Verified claims of an external identity token."""

    sub: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


@dataclass(frozen=True)
class UserIdentity:
    """The authenticated caller, passed explicitly to every service call."""

    user_id: str
    name: str


TokenVerifier = Callable[[str], IdentityClaims]

_jwks_clients: dict[str, PyJWKClient] = {}


def _get_jwks_client(jwks_uri: str) -> PyJWKClient:
    client = _jwks_clients.get(jwks_uri)
    if client is None:
        client = PyJWKClient(jwks_uri, cache_keys=True, cache_jwk_set=True, lifespan=300)
        _jwks_clients[jwks_uri] = client
    return client


def verify_google_id_token(token: str) -> IdentityClaims:
    """Verify a Google ID token and return its identity claims."""
    if settings.DEV_TOKENS_ENABLED and token.startswith(DEV_TOKEN_PREFIX):
        return IdentityClaims(sub=token[len(DEV_TOKEN_PREFIX):])

    if not settings.GOOGLE_CLIENT_ID:
        logger.error("GOOGLE_CLIENT_ID is not configured; rejecting token")
        raise DomainError(ErrorKind.not_authenticated, "Invalid token")

    issuers = [i.strip() for i in settings.GOOGLE_ISSUERS.split(",") if i.strip()]
    try:
        signing_key = _get_jwks_client(settings.GOOGLE_JWKS_URI).get_signing_key_from_jwt(token)
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.GOOGLE_CLIENT_ID,
            options={"require": ["exp", "iat", "iss", "aud", "sub"]},
        )
    except jwt.PyJWTError as exc:
        logger.warning("Token validation error: %s", exc)
        raise DomainError(ErrorKind.not_authenticated, "Invalid token") from exc

    if claims.get("iss") not in issuers:
        logger.warning("Token issuer %s is not accepted", claims.get("iss"))
        raise DomainError(ErrorKind.not_authenticated, "Invalid token")

    return IdentityClaims(
        sub=claims["sub"],
        email=claims.get("email"),
        name=claims.get("name"),
        picture=claims.get("picture"),
    )


def resolve_identity(db: Session, token: Optional[str], verify: TokenVerifier) -> UserIdentity:
    """Map a bearer token to the registered user it belongs to."""
    if not token:
        raise DomainError(ErrorKind.not_authenticated, "Unauthorized - No token provided")

    claims = verify(token)
    user = db.query(User).filter(User.google_sub == claims.sub).first()
    if not user:
        raise DomainError(ErrorKind.not_authenticated, "User not found. Please register first.")
    return UserIdentity(user_id=user.user_id, name=user.name)


def find_or_create_user(db: Session, claims: IdentityClaims) -> User:
    """Return the user for these claims, registering them on first sign-in."""
    user = db.query(User).filter(User.google_sub == claims.sub).first()
    if user:
        return user

    if not claims.email or not claims.name:
        raise DomainError(
            ErrorKind.validation_failed,
            "Token does not carry the email and name needed to register",
        )
    try:
        email = _email_adapter.validate_python(claims.email)
    except ValidationError as exc:
        raise DomainError(ErrorKind.validation_failed, "Email is invalid", field="email") from exc
    if db.query(User).filter(User.email == email).first():
        raise DomainError(ErrorKind.validation_failed, "Email has already been taken", field="email")

    user = User(
        google_sub=claims.sub,
        email=email,
        name=claims.name[:50],
        picture=claims.picture,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.user_id, user.name)
    return user
