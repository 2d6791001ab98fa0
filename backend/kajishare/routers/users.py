"""User API routes."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kajishare.database import get_db
from kajishare.dependencies import get_current_identity
from kajishare.errors import not_found
from kajishare.models.user import User
from kajishare.schemas.user import UserOut, UserUpdate
from kajishare.services.identity_service import UserIdentity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[UserOut])
def list_users(
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """List all users."""
    return db.query(User).order_by(User.created_at).all()


@router.get("/me", response_model=UserOut)
def get_me(
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return db.query(User).filter(User.user_id == identity.user_id).first()


@router.patch("/me", response_model=UserOut)
def update_me(
    payload: UserUpdate,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Update the caller's profile (partial update)."""
    user = db.query(User).filter(User.user_id == identity.user_id).first()
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s", identity.user_id)
    return user


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise not_found("User", user_id)
    return user
