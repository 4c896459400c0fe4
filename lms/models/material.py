"""Uploaded material files and their links to lessons."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, BigInteger, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lms.core.database import Base


class Material(Base):
    """
    Represents an uploaded file.
    Bytes live in the upload directory, metadata is stored here.
    """
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    file_name = Column(String(500), nullable=False)  # Original filename
    file_path = Column(String(1000), nullable=False)  # Location on disk
    file_size = Column(BigInteger, nullable=False)
    file_type = Column(String(255), nullable=False)  # MIME type
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    uploader = relationship("User", foreign_keys=[uploaded_by])
    lessons = relationship("Lesson", secondary="lesson_materials", back_populates="materials", passive_deletes=True)


class LessonMaterial(Base):
    __tablename__ = "lesson_materials"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    material_id = Column(Integer, ForeignKey("materials.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint('lesson_id', 'material_id', name='unique_lesson_material'),
    )
