"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional
from datetime import datetime
from greenwaste.models.user import UserRole
from greenwaste.schemas.common import UUID_PATTERN


class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr
    role: UserRole = UserRole.DRIVER
    settlement_id: Optional[str] = Field(None, pattern=UUID_PATTERN)
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)


class UserCreate(UserBase):
    """Schema for user creation. A password is generated when omitted."""
    password: Optional[str] = Field(None, min_length=8, max_length=50)

    @model_validator(mode="after")
    def settlement_user_needs_settlement(self):
        if self.role == UserRole.SETTLEMENT_USER and not self.settlement_id:
            raise ValueError("משתמש יישוב חייב להיות מקושר ליישוב")
        return self


class UserUpdate(BaseModel):
    """Schema for user update."""
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


class UserResponse(UserBase):
    """Schema for user response."""
    id: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserCreatedResponse(UserResponse):
    """Returned once on creation; carries the generated password if any."""
    generated_password: Optional[str] = None


class DriverBrief(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        from_attributes = True


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
    role: UserRole
