from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lms.core.auth import require_instructor
from lms.core.database import get_db
from lms.schemas.course import DashboardStats
from lms.schemas.user import Identity
from lms.services.courses import dashboard_stats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(_: Identity = Depends(require_instructor), db: Session = Depends(get_db)):
    return dashboard_stats(db)
