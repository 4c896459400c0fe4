"""User registration, login and password changes."""

import logging
import secrets
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from lms.core.auth import hash_password, verify_password
from lms.core.exceptions import ConflictError, NotFoundError, RegistrationDisabledError, UnauthorizedError
from lms.models.user import User, UserRole
from lms.schemas.user import UserRegister
from lms.services.system_settings import is_student_registration_allowed

logger = logging.getLogger(__name__)


def _create_user(db: Session, data: UserRegister, role: UserRole) -> User:
    existing = db.query(User).filter(
        or_(User.username == data.username, User.email == data.email)
    ).first()
    if existing:
        if existing.username == data.username:
            raise ConflictError("Username already exists")
        raise ConflictError("Email already exists")

    user = User(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered {role.value} {user.id} ({user.username})")
    return user


def register_student(db: Session, data: UserRegister) -> User:
    """Create a student account unless registration is switched off globally."""
    if not is_student_registration_allowed(db):
        logger.info(f"Student registration refused for {data.username}: registration disabled")
        raise RegistrationDisabledError()
    return _create_user(db, data, UserRole.student)


def register_instructor(db: Session, data: UserRegister) -> User:
    """Instructor sign-up is not subject to the student registration gate."""
    return _create_user(db, data, UserRole.instructor)


def create_anonymous_user(db: Session) -> User:
    """Create a throwaway student identity so progress can be tracked before sign-up."""
    user = User(
        username=f"anon_{secrets.token_hex(8)}",
        role=UserRole.student,
        is_anonymous=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.username == username).first()
    if user and verify_password(password, user.password_hash):
        return user
    return None


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if not verify_password(current_password, user.password_hash):
        raise UnauthorizedError("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    db.commit()
    db.refresh(user)
    return user
