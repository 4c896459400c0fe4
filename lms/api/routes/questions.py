from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from lms.api.deps import check_course_owner, get_owned_lesson, get_question_or_404
from lms.core.auth import require_instructor
from lms.core.database import get_db
from lms.core.exceptions import InvalidError
from lms.models.course import Question
from lms.schemas.course import QuestionCreate, QuestionResponse, QuestionUpdate
from lms.schemas.user import Identity

router = APIRouter()


@router.post("/", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
def create_question(
    question: QuestionCreate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    get_owned_lesson(db, question.lesson_id, identity)
    try:
        db_question = Question(**question.model_dump())
        db.add(db_question)
        db.commit()
        db.refresh(db_question)
        return db_question
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.put("/{question_id}", response_model=QuestionResponse)
def update_question(
    question_id: int,
    update: QuestionUpdate,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    question = get_question_or_404(db, question_id)
    check_course_owner(question.lesson.chapter.course, identity)

    changes = update.model_dump(exclude_unset=True)
    options = changes.get("options", question.options)
    correct_answer = changes.get("correct_answer", question.correct_answer)
    if correct_answer >= len(options):
        raise InvalidError("correct_answer must index into options")

    try:
        for field, value in changes.items():
            setattr(question, field, value)
        db.commit()
        db.refresh(question)
        return question
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(
    question_id: int,
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    question = get_question_or_404(db, question_id)
    check_course_owner(question.lesson.chapter.course, identity)
    try:
        db.delete(question)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
