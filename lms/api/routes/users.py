from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from lms.core.auth import require_instructor
from lms.core.database import get_db
from lms.core.exceptions import NotFoundError
from lms.models.user import User, UserRole
from lms.schemas.user import Identity, UserResponse

router = APIRouter()


@router.get("/", response_model=List[UserResponse])
def list_users(
    skip: int = 0,
    limit: int = 100,
    role: Optional[UserRole] = None,
    _: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    """List users with optional role filter. Password hashes are never returned."""
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.id).offset(skip).limit(limit).all()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, _: Identity = Depends(require_instructor), db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
