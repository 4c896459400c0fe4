from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from lms.core.database import Base


class StudentProgress(Base):
    """Per-lesson completion record for a student."""
    __tablename__ = "student_progress"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    score = Column(Integer, nullable=True)  # quiz score if applicable

    student = relationship("User", back_populates="progress")
    lesson = relationship("Lesson")

    __table_args__ = (
        UniqueConstraint('student_id', 'lesson_id', name='unique_student_lesson'),
    )
