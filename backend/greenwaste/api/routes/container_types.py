"""
Container type management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from greenwaste.db.session import get_db
from greenwaste.models.container_type import ContainerType
from greenwaste.models.user import User
from greenwaste.schemas.common import PaginatedResponse
from greenwaste.schemas.container_type import ContainerTypeCreate, ContainerTypeResponse, ContainerTypeUpdate
from greenwaste.core.utils import total_pages
from greenwaste.api.dependencies import get_current_user, require_admin

router = APIRouter(prefix="/container-types", tags=["container-types"])


def get_container_type_or_404(container_type_id: str, db: Session) -> ContainerType:
    container_type = db.query(ContainerType).filter(ContainerType.id == container_type_id).first()
    if not container_type:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Container type not found"
        )
    return container_type


@router.get("", response_model=PaginatedResponse[ContainerTypeResponse])
async def list_container_types(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = db.query(ContainerType)
    if search:
        query = query.filter(ContainerType.name.ilike(f"%{search}%"))

    total = query.count()
    items = query.order_by(ContainerType.size).offset((page - 1) * limit).limit(limit).all()
    return {
        "data": items,
        "pagination": {"page": page, "limit": limit, "total": total, "total_pages": total_pages(total, limit)},
    }


@router.post("", response_model=ContainerTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_container_type(
    data: ContainerTypeCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    container_type = ContainerType(**data.model_dump())
    db.add(container_type)
    db.commit()
    db.refresh(container_type)
    return container_type


@router.get("/{container_type_id}", response_model=ContainerTypeResponse)
async def get_container_type(
    container_type_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return get_container_type_or_404(container_type_id, db)


@router.put("/{container_type_id}", response_model=ContainerTypeResponse)
async def update_container_type(
    container_type_id: str,
    data: ContainerTypeUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update a container type. Changing the size changes future unit prices."""
    container_type = get_container_type_or_404(container_type_id, db)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(container_type, field, value)
    db.commit()
    db.refresh(container_type)
    return container_type


@router.delete("/{container_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_container_type(
    container_type_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    container_type = get_container_type_or_404(container_type_id, db)
    if container_type.pricing or container_type.reports:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="לא ניתן למחוק סוג מכל שיש לו תמחור או דיווחים"
        )
    db.delete(container_type)
    db.commit()
