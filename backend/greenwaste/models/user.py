"""
User model for authentication and role-based access.
"""
from sqlalchemy import Column, String, Boolean, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship
from greenwaste.db.base import BaseModel
import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    ADMIN = "ADMIN"
    SETTLEMENT_USER = "SETTLEMENT_USER"
    DRIVER = "DRIVER"


class User(BaseModel):
    """User model. Settlement users are bound to exactly one settlement."""
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.DRIVER, index=True)
    settlement_id = Column(String(36), ForeignKey("settlements.id"), nullable=True, index=True)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    settlement = relationship("Settlement", back_populates="users")
    reports = relationship("Report", back_populates="driver")
