from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lms.core.auth import require_instructor
from lms.core.database import get_db
from lms.schemas.setting import SettingValue
from lms.schemas.user import Identity
from lms.services.system_settings import get_system_setting, set_system_setting

router = APIRouter()


@router.get("/{key}", response_model=SettingValue)
def read_setting(key: str, db: Session = Depends(get_db)):
    """Value of a system setting, or null when it was never set."""
    return SettingValue(value=get_system_setting(db, key))


@router.put("/{key}")
def write_setting(
    key: str,
    setting: SettingValue,
    _: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    try:
        set_system_setting(db, key, setting.value)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return {"success": True}
