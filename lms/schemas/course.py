from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from lms.models.course import CourseStatus
from lms.schemas.base import BaseSchema
from lms.schemas.material import MaterialResponse


def _reject_null(value):
    # Omitted fields are left alone; an explicit null would violate NOT NULL
    if value is None:
        raise ValueError("must not be null")
    return value


# Request schemas (no from_attributes needed)
class CourseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: CourseStatus = CourseStatus.draft
    is_public: bool = False
    allow_registration: bool = True


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[CourseStatus] = None
    is_public: Optional[bool] = None
    allow_registration: Optional[bool] = None

    @field_validator("title", "status", "is_public", "allow_registration")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class ChapterCreate(BaseModel):
    course_id: int
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    order_index: int = Field(default=0, ge=0)


class ChapterUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)

    @field_validator("title", "order_index")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class LessonCreate(BaseModel):
    chapter_id: int
    title: str = Field(min_length=1, max_length=255)
    content: Optional[str] = None
    video_url: Optional[str] = None
    code_example: Optional[str] = None
    code_language: Optional[str] = None
    assignment: Optional[str] = None
    order_index: int = Field(default=0, ge=0)


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    video_url: Optional[str] = None
    code_example: Optional[str] = None
    code_language: Optional[str] = None
    assignment: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)

    @field_validator("title", "order_index")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class QuestionCreate(BaseModel):
    lesson_id: int
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=2)
    correct_answer: int = Field(ge=0)
    explanation: Optional[str] = None
    order_index: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def correct_answer_in_range(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index into options")
        return self


class QuestionUpdate(BaseModel):
    question: Optional[str] = Field(default=None, min_length=1)
    options: Optional[List[str]] = Field(default=None, min_length=2)
    correct_answer: Optional[int] = Field(default=None, ge=0)
    explanation: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)

    @field_validator("question", "options", "correct_answer", "order_index")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


# Response schemas (need from_attributes for ORM)
class QuestionResponse(BaseSchema):
    id: int
    lesson_id: int
    question: str
    options: List[str]
    correct_answer: int
    explanation: Optional[str] = None
    order_index: int


class LessonResponse(BaseSchema):
    id: int
    chapter_id: int
    title: str
    content: Optional[str] = None
    video_url: Optional[str] = None
    code_example: Optional[str] = None
    code_language: Optional[str] = None
    assignment: Optional[str] = None
    order_index: int
    created_at: Optional[datetime] = None


class LessonDetailResponse(LessonResponse):
    questions: List[QuestionResponse] = []
    materials: List[MaterialResponse] = []


class ChapterResponse(BaseSchema):
    id: int
    course_id: int
    title: str
    description: Optional[str] = None
    order_index: int
    created_at: Optional[datetime] = None


class ChapterWithLessonsResponse(ChapterResponse):
    lessons: List[LessonResponse] = []


class CourseResponse(BaseSchema):
    id: int
    title: str
    description: Optional[str] = None
    instructor_id: int
    status: CourseStatus
    is_public: bool
    allow_registration: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CourseWithStatsResponse(CourseResponse):
    chapters_count: int = 0
    lessons_count: int = 0
    students_count: int = 0
    average_progress: int = 0


class CourseDetailResponse(CourseResponse):
    chapters: List[ChapterWithLessonsResponse] = []


class DashboardStats(BaseModel):
    total_courses: int
    active_students: int
    assignments: int
    materials: int
