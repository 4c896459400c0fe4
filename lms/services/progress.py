"""
Lesson completion tracking and course progress aggregation.

A completion event upserts the (student, lesson) progress row and, when the
lesson is marked complete, recomputes the student's completion percentage
for the owning course from scratch and stores it on the enrollment
(creating the enrollment first if the student was never enrolled).
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lms.core.exceptions import NotFoundError
from lms.models.course import Chapter, Course, Lesson
from lms.models.enrollment import Enrollment
from lms.models.progress import StudentProgress
from lms.models.user import User

logger = logging.getLogger(__name__)


def completion_percentage(completed_count: int, total_lessons: int) -> int:
    """round(100 * completed / total) with halves rounded up; 0 for an empty course."""
    if total_lessons <= 0:
        return 0
    return (200 * completed_count + total_lessons) // (2 * total_lessons)


def resolve_lesson_course(db: Session, lesson_id: int) -> Tuple[Lesson, Course]:
    """Walk lesson -> chapter -> course, raising NotFoundError at the first missing link."""
    lesson = db.get(Lesson, lesson_id)
    if lesson is None:
        raise NotFoundError("Lesson not found")
    chapter = db.get(Chapter, lesson.chapter_id)
    if chapter is None:
        raise NotFoundError("Chapter not found")
    course = db.get(Course, chapter.course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return lesson, course


def upsert_student_progress(
    db: Session,
    student_id: int,
    lesson_id: int,
    completed: bool,
    completed_at: Optional[datetime] = None,
    score: Optional[int] = None,
) -> StudentProgress:
    """Create or overwrite the single progress row for (student, lesson). Caller commits."""
    progress = (
        db.query(StudentProgress)
        .filter(StudentProgress.student_id == student_id, StudentProgress.lesson_id == lesson_id)
        .with_for_update()
        .first()
    )
    if progress is None:
        progress = StudentProgress(student_id=student_id, lesson_id=lesson_id, completed=False)
        db.add(progress)

    # completed_at is stamped only on the transition to completed
    if completed and not progress.completed:
        progress.completed_at = completed_at or datetime.now(timezone.utc)
    progress.completed = completed
    if score is not None:
        progress.score = score

    db.flush()
    return progress


def _find_enrollment(db: Session, student_id: int, course_id: int) -> Optional[Enrollment]:
    return (
        db.query(Enrollment)
        .filter(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
        .with_for_update()
        .first()
    )


def ensure_enrollment(db: Session, student_id: int, course_id: int) -> Enrollment:
    """Return the student's enrollment in the course, creating it at 0% if missing. Caller commits."""
    enrollment = _find_enrollment(db, student_id, course_id)
    if enrollment is not None:
        return enrollment

    try:
        with db.begin_nested():
            enrollment = Enrollment(student_id=student_id, course_id=course_id, progress=0)
            db.add(enrollment)
    except IntegrityError:
        # A concurrent request enrolled the student first
        logger.info(f"Enrollment of student {student_id} in course {course_id} already created, reusing it")
        return _find_enrollment(db, student_id, course_id)

    logger.info(f"Auto-enrolled student {student_id} in course {course_id}")
    return enrollment


def count_course_lessons(db: Session, course_id: int) -> int:
    return (
        db.query(func.count(Lesson.id))
        .join(Chapter, Lesson.chapter_id == Chapter.id)
        .filter(Chapter.course_id == course_id)
        .scalar()
    ) or 0


def get_course_progress_rows(db: Session, student_id: int, course_id: int) -> List[StudentProgress]:
    """All of the student's progress rows restricted to the course's lessons."""
    return (
        db.query(StudentProgress)
        .join(Lesson, StudentProgress.lesson_id == Lesson.id)
        .join(Chapter, Lesson.chapter_id == Chapter.id)
        .filter(StudentProgress.student_id == student_id, Chapter.course_id == course_id)
        .order_by(Chapter.order_index, Lesson.order_index)
        .all()
    )


def compute_course_progress(db: Session, student_id: int, course_id: int) -> int:
    """Derive the completion percentage from the stored progress rows."""
    total_lessons = count_course_lessons(db, course_id)
    completed_count = sum(1 for p in get_course_progress_rows(db, student_id, course_id) if p.completed)
    return completion_percentage(completed_count, total_lessons)


def record_completion(
    db: Session,
    student_id: int,
    lesson_id: int,
    completed: bool,
    completed_at: Optional[datetime] = None,
    score: Optional[int] = None,
) -> StudentProgress:
    """
    Apply one lesson completion event and return the upserted progress row.

    Lookups happen before any write, so a NotFoundError leaves the database
    untouched. When ``completed`` is true the enrollment progress is
    recomputed (never incremented) so it always matches the stored rows.
    """
    lesson, course = resolve_lesson_course(db, lesson_id)
    if db.get(User, student_id) is None:
        raise NotFoundError("Student not found")

    try:
        progress = upsert_student_progress(db, student_id, lesson.id, completed, completed_at, score)

        if completed:
            enrollment = ensure_enrollment(db, student_id, course.id)
            enrollment.progress = compute_course_progress(db, student_id, course.id)
            logger.info(
                f"Student {student_id} completed lesson {lesson.id}; "
                f"course {course.id} progress is now {enrollment.progress}%"
            )

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(progress)
    return progress
