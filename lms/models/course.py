from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, JSON
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from lms.core.database import Base


class CourseStatus(str, enum.Enum):
    draft = "draft"
    published = "published"
    archived = "archived"


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    instructor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SAEnum(CourseStatus, name="course_status"), nullable=False, default=CourseStatus.draft)
    is_public = Column(Boolean, nullable=False, default=False)
    allow_registration = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships with cascades to avoid orphan rows
    instructor = relationship("User", back_populates="courses")
    chapters = relationship(
        "Chapter",
        back_populates="course",
        order_by="Chapter.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan", passive_deletes=True)


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("Course", back_populates="chapters")
    lessons = relationship(
        "Lesson",
        back_populates="chapter",
        order_by="Lesson.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)  # rich text (HTML)
    video_url = Column(String(1000), nullable=True)
    code_example = Column(Text, nullable=True)
    code_language = Column(String(50), nullable=True)
    assignment = Column(Text, nullable=True)
    chapter_id = Column(Integer, ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    chapter = relationship("Chapter", back_populates="lessons")
    questions = relationship(
        "Question",
        back_populates="lesson",
        order_by="Question.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    materials = relationship(
        "Material",
        secondary="lesson_materials",
        back_populates="lessons",
        order_by="Material.id",
        passive_deletes=True,
    )


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # ordered list of option strings
    correct_answer = Column(Integer, nullable=False)  # index into options
    explanation = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)

    lesson = relationship("Lesson", back_populates="questions")
