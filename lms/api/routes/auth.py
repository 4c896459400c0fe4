from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lms.core.auth import create_access_token, get_current_identity, require_authenticated
from lms.core.database import get_db
from lms.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from lms.models.user import User
from lms.schemas.user import (
    AuthResponse,
    ChangePasswordRequest,
    Identity,
    LoginRequest,
    UserRegister,
    UserResponse,
)
from lms.services import accounts

router = APIRouter()


def _auth_response(user: User, message: str) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=create_access_token(user),
        message=message,
    )


@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Exchange username/password for a bearer token."""
    user = accounts.authenticate_user(db, credentials.username, credentials.password)
    if not user:
        raise UnauthorizedError("Invalid credentials")
    return _auth_response(user, "Login successful")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: UserRegister, db: Session = Depends(get_db)):
    """Register a student. Refused while allow_student_registration is "false"."""
    try:
        user = accounts.register_student(db, data)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return _auth_response(user, "Registration successful")


@router.post("/register-instructor", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_instructor(data: UserRegister, db: Session = Depends(get_db)):
    """Register an instructor account."""
    try:
        user = accounts.register_instructor(db, data)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return _auth_response(user, "Instructor registration successful")


@router.post("/anonymous", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def start_anonymous_session(db: Session = Depends(get_db)):
    """Create an anonymous learner so progress can be recorded before sign-up."""
    try:
        user = accounts.create_anonymous_user(db)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return _auth_response(user, "Anonymous session started")


@router.put("/change-password")
def change_password(
    data: ChangePasswordRequest,
    identity: Identity = Depends(require_authenticated),
    db: Session = Depends(get_db),
):
    if identity.user_id != data.user_id:
        raise ForbiddenError("Users may only change their own password")
    accounts.change_password(db, data.user_id, data.current_password, data.new_password)
    return {"message": "Password updated successfully"}


@router.get("/me", response_model=UserResponse)
def get_me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    user = db.get(User, identity.user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
