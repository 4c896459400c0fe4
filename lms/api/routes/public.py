"""Unauthenticated catalogue: published courses and their lessons."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lms.api.deps import get_lesson_or_404
from lms.core.database import get_db
from lms.core.exceptions import ForbiddenError, NotFoundError
from lms.models.course import CourseStatus
from lms.schemas.course import CourseDetailResponse, CourseWithStatsResponse, LessonDetailResponse
from lms.services.courses import list_public_courses
from lms.services.export import load_course_tree

router = APIRouter()


@router.get("/courses", response_model=List[CourseWithStatsResponse])
def public_courses(db: Session = Depends(get_db)):
    return list_public_courses(db)


@router.get("/courses/{course_id}", response_model=CourseDetailResponse)
def public_course(course_id: int, db: Session = Depends(get_db)):
    course = load_course_tree(db, course_id)
    if course.status != CourseStatus.published:
        raise ForbiddenError("Course is not public")
    return course


@router.get("/lessons/{lesson_id}/details", response_model=LessonDetailResponse)
def public_lesson(lesson_id: int, db: Session = Depends(get_db)):
    lesson = get_lesson_or_404(db, lesson_id)
    # Lessons of unpublished courses are reported as missing
    if lesson.chapter.course.status != CourseStatus.published:
        raise NotFoundError("Lesson not found")
    return lesson
