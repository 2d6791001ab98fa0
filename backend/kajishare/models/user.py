"""User ORM model."""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from kajishare.database import Base


class AccountType(str, enum.Enum):
    user = "user"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    google_sub = Column(String(255), nullable=False, unique=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    picture = Column(String(500), nullable=True)
    account_type = Column(SAEnum(AccountType, native_enum=False, length=20), nullable=False, default=AccountType.user)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    memberships = relationship("Membership", back_populates="user", cascade="all, delete-orphan")
