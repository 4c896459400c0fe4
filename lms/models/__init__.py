# Import all models here so Base.metadata is complete for Alembic
from lms.models.user import User, UserRole
from lms.models.course import Course, CourseStatus, Chapter, Lesson, Question
from lms.models.material import Material, LessonMaterial
from lms.models.enrollment import Enrollment
from lms.models.progress import StudentProgress
from lms.models.system_setting import SystemSetting

__all__ = [
    "User",
    "UserRole",
    "Course",
    "CourseStatus",
    "Chapter",
    "Lesson",
    "Question",
    "Material",
    "LessonMaterial",
    "Enrollment",
    "StudentProgress",
    "SystemSetting",
]
