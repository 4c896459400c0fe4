"""Read-side aggregates for course listings and the instructor dashboard.

Counts are recomputed on every request from the underlying rows.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lms.models.course import Chapter, Course, CourseStatus, Lesson
from lms.models.enrollment import Enrollment
from lms.models.material import Material
from lms.schemas.course import CourseResponse, CourseWithStatsResponse, DashboardStats
from lms.services.progress import count_course_lessons


def course_with_stats(db: Session, course: Course) -> CourseWithStatsResponse:
    chapters_count = db.query(func.count(Chapter.id)).filter(Chapter.course_id == course.id).scalar() or 0
    progresses = [
        row.progress or 0
        for row in db.query(Enrollment.progress).filter(Enrollment.course_id == course.id).all()
    ]
    average_progress = 0
    if progresses:
        # Half-up mean, same rounding as lesson completion
        average_progress = (2 * sum(progresses) + len(progresses)) // (2 * len(progresses))

    return CourseWithStatsResponse(
        **CourseResponse.model_validate(course).model_dump(),
        chapters_count=chapters_count,
        lessons_count=count_course_lessons(db, course.id),
        students_count=len(progresses),
        average_progress=average_progress,
    )


def list_courses_with_stats(db: Session, status: Optional[CourseStatus] = None) -> List[CourseWithStatsResponse]:
    query = db.query(Course)
    if status is not None:
        query = query.filter(Course.status == status)
    return [course_with_stats(db, c) for c in query.order_by(Course.id).all()]


def list_public_courses(db: Session) -> List[CourseWithStatsResponse]:
    courses = (
        db.query(Course)
        .filter(Course.status == CourseStatus.published, Course.is_public.is_(True))
        .order_by(Course.id)
        .all()
    )
    return [course_with_stats(db, c) for c in courses]


def dashboard_stats(db: Session) -> DashboardStats:
    assignments = (
        db.query(func.count(Lesson.id))
        .filter(Lesson.assignment.isnot(None), Lesson.assignment != "")
        .scalar()
    ) or 0
    return DashboardStats(
        total_courses=db.query(func.count(Course.id)).scalar() or 0,
        active_students=db.query(func.count(Enrollment.id)).scalar() or 0,
        assignments=assignments,
        materials=db.query(func.count(Material.id)).scalar() or 0,
    )
