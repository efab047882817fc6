"""
Role-based row scoping for report-derived data.

Every read path over reports (and data joined to reports) applies the scope
predicate before any user-supplied filter, so filters can only narrow the
caller's scope, never widen it.
"""
from typing import Optional
from fastapi import HTTPException, status
from sqlalchemy import true
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement
from greenwaste.models.user import User, UserRole


def scope_predicate(model, user: User) -> ColumnElement:
    """
    Return the filter clause limiting ``model`` rows to what ``user`` may see.

    ``model`` must expose ``driver_id`` and ``settlement_id`` columns.
    """
    if user.role == UserRole.ADMIN:
        return true()
    if user.role == UserRole.DRIVER:
        return model.driver_id == user.id
    if user.role == UserRole.SETTLEMENT_USER:
        if not user.settlement_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="משתמש יישוב חייב להיות מקושר ליישוב"
            )
        return model.settlement_id == user.settlement_id
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="תפקיד משתמש לא מוכר"
    )


def apply_scope(query: Query, model, user: User) -> Query:
    """Apply the role scope to a query. Must be the first filter applied."""
    return query.filter(scope_predicate(model, user))


def admin_filter(user: User, value: Optional[str]) -> Optional[str]:
    """Filters that only administrators may choose; ignored for other roles."""
    return value if user.role == UserRole.ADMIN else None
