from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lms.api.deps import check_self_or_instructor, get_course_or_404
from lms.core.auth import get_current_identity
from lms.core.database import get_db
from lms.schemas.enrollment import ProgressCreate, ProgressResponse
from lms.schemas.user import Identity
from lms.services.progress import get_course_progress_rows, record_completion

router = APIRouter()


@router.post("/", response_model=ProgressResponse)
def record_progress(
    event: ProgressCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Record a lesson completion event.

    - Upserts the (student, lesson) progress row
    - On completion, recomputes the course percentage on the enrollment,
      enrolling the student first if needed
    """
    check_self_or_instructor(identity, event.student_id)
    return record_completion(
        db,
        student_id=event.student_id,
        lesson_id=event.lesson_id,
        completed=event.completed,
        completed_at=event.completed_at,
        score=event.score,
    )


@router.get("/student/{student_id}/course/{course_id}", response_model=List[ProgressResponse])
def get_course_progress(
    student_id: int,
    course_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    check_self_or_instructor(identity, student_id)
    get_course_or_404(db, course_id)
    return get_course_progress_rows(db, student_id, course_id)
