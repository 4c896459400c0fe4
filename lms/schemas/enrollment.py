from pydantic import AliasChoices, BaseModel, Field
from typing import Optional
from datetime import datetime
from lms.schemas.base import BaseSchema


class EnrollmentCreate(BaseModel):
    student_id: int
    course_id: int


class EnrollmentResponse(BaseSchema):
    id: int
    course_id: int
    student_id: int
    enrolled_at: Optional[datetime] = None
    progress: int


class ProgressCreate(BaseModel):
    """Lesson completion event. Accepts both snake_case and camelCase keys."""
    student_id: int = Field(validation_alias=AliasChoices("student_id", "studentId"))
    lesson_id: int = Field(validation_alias=AliasChoices("lesson_id", "lessonId"))
    completed: bool
    completed_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("completed_at", "completedAt")
    )
    score: Optional[int] = Field(default=None, ge=0)


class ProgressResponse(BaseSchema):
    id: int
    student_id: int
    lesson_id: int
    completed: bool
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
