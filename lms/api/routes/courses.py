import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lms.api.deps import get_course_or_404, get_owned_course
from lms.core.auth import get_current_identity, require_instructor
from lms.core.database import get_db
from lms.models.course import Chapter, Course, CourseStatus
from lms.models.enrollment import Enrollment
from lms.schemas.course import (
    ChapterResponse,
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseUpdate,
    CourseWithStatsResponse,
)
from lms.schemas.enrollment import EnrollmentResponse
from lms.schemas.user import Identity
from lms.services.courses import list_courses_with_stats
from lms.services.export import archive_file_name, export_course, load_course_tree
from lms.services.storage import MaterialStorage, get_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=List[CourseWithStatsResponse])
def list_courses(
    status: Optional[CourseStatus] = None,
    _: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """List courses with chapter/lesson/student counts and average progress."""
    return list_courses_with_stats(db, status)


@router.post("/", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    course: CourseCreate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    """Create a course owned by the calling instructor."""
    try:
        db_course = Course(**course.model_dump(), instructor_id=identity.user_id)
        db.add(db_course)
        db.commit()
        db.refresh(db_course)
        logger.info(f"Course {db_course.id} created by instructor {identity.user_id}")
        return db_course
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.get("/{course_id}", response_model=CourseDetailResponse)
def get_course(course_id: int, _: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Get a course with its ordered chapters and lessons."""
    return load_course_tree(db, course_id)


@router.put("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: int,
    update: CourseUpdate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    course = get_owned_course(db, course_id, identity)
    try:
        for field, value in update.model_dump(exclude_unset=True).items():
            setattr(course, field, value)
        db.commit()
        db.refresh(course)
        return course
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: int,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    """Delete a course; chapters, lessons, questions, links and enrollments cascade."""
    course = get_owned_course(db, course_id, identity)
    try:
        db.delete(course)
        db.commit()
        logger.info(f"Course {course_id} deleted by instructor {identity.user_id}")
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{course_id}/chapters", response_model=List[ChapterResponse])
def list_chapters(course_id: int, _: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    get_course_or_404(db, course_id)
    return (
        db.query(Chapter)
        .filter(Chapter.course_id == course_id)
        .order_by(Chapter.order_index, Chapter.id)
        .all()
    )


@router.get("/{course_id}/enrollments", response_model=List[EnrollmentResponse])
def list_course_enrollments(
    course_id: int,
    _: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    get_course_or_404(db, course_id)
    return db.query(Enrollment).filter(Enrollment.course_id == course_id).order_by(Enrollment.id).all()


@router.get("/{course_id}/export")
def export_course_archive(
    course_id: int,
    _: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
    storage: MaterialStorage = Depends(get_storage),
):
    """Download the course as a zip of Markdown files plus material files."""
    course = get_course_or_404(db, course_id)
    data = export_course(db, course_id, storage)
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive_file_name(course)}"'},
    )
