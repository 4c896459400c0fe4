from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from typing import List

from lms.api.deps import check_self_or_instructor, get_course_or_404
from lms.core.auth import get_current_identity
from lms.core.database import get_db
from lms.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from lms.models.enrollment import Enrollment
from lms.models.user import User, UserRole
from lms.schemas.enrollment import EnrollmentCreate, EnrollmentResponse
from lms.schemas.user import Identity

router = APIRouter()


@router.post("/", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def enroll_student(
    enrollment: EnrollmentCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Enroll a student in a course. Progress always starts at 0 and is derived afterwards."""
    check_self_or_instructor(identity, enrollment.student_id)

    if not db.get(User, enrollment.student_id):
        raise NotFoundError("User not found")
    course = get_course_or_404(db, enrollment.course_id)
    if not course.allow_registration and identity.role != UserRole.instructor:
        raise ForbiddenError("Course is not open for registration")

    try:
        db_enrollment = Enrollment(student_id=enrollment.student_id, course_id=enrollment.course_id, progress=0)
        db.add(db_enrollment)
        db.commit()
        db.refresh(db_enrollment)
        return db_enrollment
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already enrolled in this course")
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.get("/student/{student_id}", response_model=List[EnrollmentResponse])
def get_student_enrollments(
    student_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Get all enrollments of a student."""
    check_self_or_instructor(identity, student_id)
    return db.query(Enrollment).filter(Enrollment.student_id == student_id).order_by(Enrollment.id).all()
