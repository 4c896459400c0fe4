from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lms.api.deps import get_chapter_or_404, get_owned_chapter, get_owned_course
from lms.core.auth import get_current_identity, require_instructor
from lms.core.database import get_db
from lms.models.course import Chapter, Lesson
from lms.schemas.course import ChapterCreate, ChapterResponse, ChapterUpdate, LessonResponse
from lms.schemas.user import Identity

router = APIRouter()


@router.post("/", response_model=ChapterResponse, status_code=status.HTTP_201_CREATED)
def create_chapter(
    chapter: ChapterCreate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    get_owned_course(db, chapter.course_id, identity)
    try:
        db_chapter = Chapter(**chapter.model_dump())
        db.add(db_chapter)
        db.commit()
        db.refresh(db_chapter)
        return db_chapter
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.put("/{chapter_id}", response_model=ChapterResponse)
def update_chapter(
    chapter_id: int,
    update: ChapterUpdate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    chapter = get_owned_chapter(db, chapter_id, identity)
    try:
        for field, value in update.model_dump(exclude_unset=True).items():
            setattr(chapter, field, value)
        db.commit()
        db.refresh(chapter)
        return chapter
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.delete("/{chapter_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_chapter(
    chapter_id: int,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    chapter = get_owned_chapter(db, chapter_id, identity)
    try:
        db.delete(chapter)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{chapter_id}/lessons", response_model=List[LessonResponse])
def list_lessons(chapter_id: int, _: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    get_chapter_or_404(db, chapter_id)
    return (
        db.query(Lesson)
        .filter(Lesson.chapter_id == chapter_id)
        .order_by(Lesson.order_index, Lesson.id)
        .all()
    )
