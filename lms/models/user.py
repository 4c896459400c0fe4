from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from lms.core.database import Base


class UserRole(str, enum.Enum):
    instructor = "instructor"
    student = "student"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    # Anonymous learners have neither email nor password
    email = Column(String(255), nullable=True, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    role = Column(SAEnum(UserRole, name="user_role"), nullable=False, default=UserRole.student)
    is_anonymous = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    courses = relationship("Course", back_populates="instructor", passive_deletes=True)
    enrollments = relationship("Enrollment", back_populates="student", passive_deletes=True)
    progress = relationship("StudentProgress", back_populates="student", passive_deletes=True)
