from typing import Optional
from datetime import datetime
from lms.schemas.base import BaseSchema


class MaterialResponse(BaseSchema):
    id: int
    title: str
    file_name: str
    file_size: int
    file_type: str
    uploaded_by: Optional[int] = None
    created_at: Optional[datetime] = None
