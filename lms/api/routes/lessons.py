from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lms.api.deps import get_lesson_or_404, get_owned_chapter, get_owned_lesson
from lms.core.auth import get_current_identity, require_instructor
from lms.core.database import get_db
from lms.models.course import Lesson
from lms.schemas.course import LessonCreate, LessonDetailResponse, LessonResponse, LessonUpdate
from lms.schemas.user import Identity

router = APIRouter()


@router.get("/{lesson_id}", response_model=LessonResponse)
def get_lesson(lesson_id: int, _: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return get_lesson_or_404(db, lesson_id)


@router.get("/{lesson_id}/details", response_model=LessonDetailResponse)
def get_lesson_details(lesson_id: int, _: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Lesson with its ordered questions and linked materials."""
    return get_lesson_or_404(db, lesson_id)


@router.post("/", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
def create_lesson(
    lesson: LessonCreate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    get_owned_chapter(db, lesson.chapter_id, identity)
    try:
        db_lesson = Lesson(**lesson.model_dump())
        db.add(db_lesson)
        db.commit()
        db.refresh(db_lesson)
        return db_lesson
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.put("/{lesson_id}", response_model=LessonResponse)
def update_lesson(
    lesson_id: int,
    update: LessonUpdate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    lesson = get_owned_lesson(db, lesson_id, identity)
    try:
        for field, value in update.model_dump(exclude_unset=True).items():
            setattr(lesson, field, value)
        db.commit()
        db.refresh(lesson)
        return lesson
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.delete("/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lesson(
    lesson_id: int,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    lesson = get_owned_lesson(db, lesson_id, identity)
    try:
        db.delete(lesson)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
