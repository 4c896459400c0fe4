"""Key/value system settings store."""

from typing import Optional

from sqlalchemy.orm import Session

from lms.models.system_setting import SystemSetting

ALLOW_STUDENT_REGISTRATION = "allow_student_registration"


def get_system_setting(db: Session, key: str) -> Optional[str]:
    setting = db.get(SystemSetting, key)
    return setting.value if setting else None


def set_system_setting(db: Session, key: str, value: Optional[str]) -> SystemSetting:
    """Insert or overwrite ``key``. Caller commits."""
    setting = db.get(SystemSetting, key)
    if setting is None:
        setting = SystemSetting(key=key, value=value)
        db.add(setting)
    else:
        setting.value = value
    db.flush()
    return setting


def is_student_registration_allowed(db: Session) -> bool:
    # Only the literal "false" disables registration
    return get_system_setting(db, ALLOW_STUDENT_REGISTRATION) != "false"
