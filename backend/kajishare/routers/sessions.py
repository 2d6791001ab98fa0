"""Sign-in route: verifies a Google ID token and registers first-time users."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.dependencies import get_verified_claims
from kajishare.schemas.user import SessionOut, UserOut
from kajishare.services.identity_service import IdentityClaims, find_or_create_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/google", response_model=SessionOut)
def google_auth(claims: IdentityClaims = Depends(get_verified_claims), db: Session = Depends(get_db)):
    """Sign in with a Google ID token sent as ``Authorization: Bearer <token>``."""
    user = find_or_create_user(db, claims)
    logger.info("User %s signed in", user.user_id)
    return SessionOut(message="Login successful", user=UserOut.model_validate(user))
