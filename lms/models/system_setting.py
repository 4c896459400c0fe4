from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from lms.core.database import Base


class SystemSetting(Base):
    """Global key/value settings (e.g. allow_student_registration)."""
    __tablename__ = "system_settings"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
