"""
Bearer-token authentication and role gating.

- JWT (HS256) tokens carrying user id, username, role and the anonymous flag
- bcrypt password hashing
- FastAPI dependencies that attach the verified identity to a request
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from lms.core.config import get_settings
from lms.core.exceptions import ForbiddenError, UnauthorizedError
from lms.models.user import User, UserRole
from lms.schemas.user import Identity

# bcrypt only considers the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

bearer_scheme = HTTPBearer(auto_error=False)


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Salted one-way hash for storage."""
    if not password:
        raise ValueError("Password cannot be empty")
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token for ``user``. Defaults to the configured session lifetime (7 days)."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.access_token_expire_days)
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "role": UserRole(user.role).value,
        "is_anonymous": bool(user.is_anonymous),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Identity:
    """Check signature and expiry and return the embedded identity."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")

    try:
        return Identity(
            user_id=int(payload["sub"]),
            username=payload["username"],
            role=payload["role"],
            is_anonymous=payload.get("is_anonymous", False),
        )
    except (KeyError, ValueError):
        raise UnauthorizedError("Invalid token payload")


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Require ``Authorization: Bearer <token>``; anonymous sessions are accepted."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")
    return verify_access_token(credentials.credentials)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    if credentials is None or not credentials.credentials:
        return None
    return verify_access_token(credentials.credentials)


def require_authenticated(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Reject anonymous sessions."""
    if identity.is_anonymous:
        raise UnauthorizedError("Authentication required")
    return identity


def require_role(role: UserRole):
    """Dependency factory: 403 unless the verified identity has ``role``."""
    def role_checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.is_anonymous or identity.role != role:
            raise ForbiddenError("Insufficient permissions")
        return identity
    return role_checker


require_instructor = require_role(UserRole.instructor)
