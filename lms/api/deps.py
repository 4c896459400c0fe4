"""Lookup helpers shared by routers: fetch-or-404 and course ownership checks."""

from sqlalchemy.orm import Session

from lms.core.exceptions import ForbiddenError, NotFoundError
from lms.models.course import Chapter, Course, Lesson, Question
from lms.models.user import UserRole
from lms.schemas.user import Identity


def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")
    return course


def get_chapter_or_404(db: Session, chapter_id: int) -> Chapter:
    chapter = db.get(Chapter, chapter_id)
    if not chapter:
        raise NotFoundError("Chapter not found")
    return chapter


def get_lesson_or_404(db: Session, lesson_id: int) -> Lesson:
    lesson = db.get(Lesson, lesson_id)
    if not lesson:
        raise NotFoundError("Lesson not found")
    return lesson


def get_question_or_404(db: Session, question_id: int) -> Question:
    question = db.get(Question, question_id)
    if not question:
        raise NotFoundError("Question not found")
    return question


def check_course_owner(course: Course, identity: Identity) -> Course:
    """Only the instructor who owns a course may change it."""
    if identity.role != UserRole.instructor or course.instructor_id != identity.user_id:
        raise ForbiddenError("This course belongs to another instructor")
    return course


def get_owned_course(db: Session, course_id: int, identity: Identity) -> Course:
    return check_course_owner(get_course_or_404(db, course_id), identity)


def get_owned_chapter(db: Session, chapter_id: int, identity: Identity) -> Chapter:
    chapter = get_chapter_or_404(db, chapter_id)
    check_course_owner(chapter.course, identity)
    return chapter


def get_owned_lesson(db: Session, lesson_id: int, identity: Identity) -> Lesson:
    lesson = get_lesson_or_404(db, lesson_id)
    check_course_owner(lesson.chapter.course, identity)
    return lesson


def check_self_or_instructor(identity: Identity, user_id: int) -> None:
    """Students act only on their own records; instructors may act on anyone's."""
    if identity.role != UserRole.instructor and identity.user_id != user_id:
        raise ForbiddenError("Insufficient permissions")
