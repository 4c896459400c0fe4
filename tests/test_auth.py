from datetime import timedelta

import pytest
from jose import jwt
from pydantic import ValidationError

from lms.core.auth import (
    create_access_token,
    hash_password,
    require_role,
    verify_access_token,
    verify_password,
)
from lms.core.exceptions import ConflictError, ForbiddenError, RegistrationDisabledError, UnauthorizedError
from lms.models import User, UserRole
from lms.schemas.user import Identity, UserRegister
from lms.services import accounts
from lms.services.system_settings import (
    ALLOW_STUDENT_REGISTRATION,
    is_student_registration_allowed,
    set_system_setting,
)

STRONG_PASSWORD = "Sup3r$ecret"


def _register_data(username: str) -> UserRegister:
    return UserRegister(username=username, email=f"{username}@example.com", password=STRONG_PASSWORD)


def test_password_hash_is_salted_and_verifies():
    first = hash_password(STRONG_PASSWORD)
    second = hash_password(STRONG_PASSWORD)

    assert first != second
    assert first != STRONG_PASSWORD
    assert verify_password(STRONG_PASSWORD, first)
    assert not verify_password("wrong", first)
    assert not verify_password(STRONG_PASSWORD, None)


def test_token_round_trip():
    user = User(id=7, username="alice", role=UserRole.student, is_anonymous=False)

    identity = verify_access_token(create_access_token(user))

    assert identity == Identity(user_id=7, username="alice", role=UserRole.student, is_anonymous=False)


def test_expired_token_is_rejected():
    user = User(id=1, username="alice", role=UserRole.student, is_anonymous=False)
    token = create_access_token(user, expires_delta=timedelta(seconds=-1))

    with pytest.raises(UnauthorizedError):
        verify_access_token(token)


def test_token_signed_with_other_secret_is_rejected():
    token = jwt.encode(
        {"sub": "1", "username": "alice", "role": "instructor", "is_anonymous": False},
        "not-the-server-secret",
        algorithm="HS256",
    )

    with pytest.raises(UnauthorizedError):
        verify_access_token(token)


def test_require_role():
    checker = require_role(UserRole.instructor)
    staff = Identity(user_id=1, username="t", role=UserRole.instructor)
    learner = Identity(user_id=2, username="s", role=UserRole.student)

    assert checker(staff) is staff
    with pytest.raises(ForbiddenError):
        checker(learner)


def test_require_role_rejects_anonymous():
    checker = require_role(UserRole.student)
    with pytest.raises(ForbiddenError):
        checker(Identity(user_id=3, username="anon_x", role=UserRole.student, is_anonymous=True))


def test_weak_password_is_invalid():
    with pytest.raises(ValidationError):
        UserRegister(username="bob", email="bob@example.com", password="password")


def test_registration_allowed_unless_setting_is_false(db):
    assert is_student_registration_allowed(db)
    set_system_setting(db, ALLOW_STUDENT_REGISTRATION, "no")
    assert is_student_registration_allowed(db)
    set_system_setting(db, ALLOW_STUDENT_REGISTRATION, "false")
    assert not is_student_registration_allowed(db)


def test_disabled_registration_creates_no_user(db):
    set_system_setting(db, ALLOW_STUDENT_REGISTRATION, "false")
    db.commit()

    with pytest.raises(RegistrationDisabledError):
        accounts.register_student(db, _register_data("carol"))

    assert db.query(User).count() == 0


def test_instructor_registration_ignores_setting(db):
    set_system_setting(db, ALLOW_STUDENT_REGISTRATION, "false")
    db.commit()

    user = accounts.register_instructor(db, _register_data("prof"))

    assert user.role == UserRole.instructor
    assert verify_password(STRONG_PASSWORD, user.password_hash)


def test_duplicate_username_is_rejected(db):
    accounts.register_student(db, _register_data("dave"))

    with pytest.raises(ConflictError):
        accounts.register_student(db, _register_data("dave"))


def test_authenticate_and_change_password(db):
    user = accounts.register_student(db, _register_data("erin"))

    assert accounts.authenticate_user(db, "erin", STRONG_PASSWORD).id == user.id
    assert accounts.authenticate_user(db, "erin", "nope") is None

    with pytest.raises(UnauthorizedError):
        accounts.change_password(db, user.id, "nope", "N3w$ecret")

    accounts.change_password(db, user.id, STRONG_PASSWORD, "N3w$ecret")
    assert accounts.authenticate_user(db, "erin", "N3w$ecret") is not None


def test_anonymous_user_cannot_log_in(db):
    user = accounts.create_anonymous_user(db)

    assert user.is_anonymous
    assert user.username.startswith("anon_")
    assert accounts.authenticate_user(db, user.username, "") is None
