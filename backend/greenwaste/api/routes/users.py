"""
User management routes (drivers, settlement users, administrators).
"""
import secrets
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from greenwaste.db.session import get_db
from greenwaste.schemas.common import PaginatedResponse
from greenwaste.schemas.user import UserCreate, UserCreatedResponse, UserResponse, UserUpdate
from greenwaste.models.settlement import Settlement
from greenwaste.models.user import User, UserRole
from greenwaste.core.security import get_password_hash
from greenwaste.core.utils import total_pages
from greenwaste.api.dependencies import get_current_user, require_admin

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    settlement_id: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List users, optionally by role or settlement."""
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if settlement_id:
        query = query.filter(User.settlement_id == settlement_id)

    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "data": users,
        "pagination": {"page": page, "limit": limit, "total": total, "total_pages": total_pages(total, limit)},
    }


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a user. When no password is given one is generated and returned once."""
    existing = db.query(User).filter(User.email == user_data.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already exists"
        )

    if user_data.settlement_id:
        settlement = db.query(Settlement).filter(Settlement.id == user_data.settlement_id).first()
        if not settlement:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Settlement not found"
            )

    generated_password = None
    password = user_data.password
    if not password:
        generated_password = password = secrets.token_urlsafe(12)

    new_user = User(
        email=user_data.email,
        hashed_password=get_password_hash(password),
        role=user_data.role,
        settlement_id=user_data.settlement_id,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    response = UserCreatedResponse.model_validate(new_user)
    response.generated_password = generated_password
    return response


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get user by ID."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update user profile, password or active flag."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    changes = user_data.model_dump(exclude_unset=True)
    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)
    for field, value in changes.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user
