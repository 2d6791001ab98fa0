"""Request-scoped dependencies: bearer token → verified identity."""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.errors import DomainError, ErrorKind
from kajishare.services.identity_service import (
    IdentityClaims,
    TokenVerifier,
    UserIdentity,
    resolve_identity,
    verify_google_id_token,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_verifier() -> TokenVerifier:
    """The identity-token verifier; overridden in tests."""
    return verify_google_id_token


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_verified_claims(
    token: Optional[str] = Depends(get_bearer_token),
    verify: TokenVerifier = Depends(get_token_verifier),
) -> IdentityClaims:
    if not token:
        raise DomainError(ErrorKind.not_authenticated, "Unauthorized - No token provided")
    return verify(token)


def get_current_identity(
    token: Optional[str] = Depends(get_bearer_token),
    verify: TokenVerifier = Depends(get_token_verifier),
    db: Session = Depends(get_db),
) -> UserIdentity:
    return resolve_identity(db, token, verify)
