from pydantic import BaseModel
from typing import Optional


class SettingValue(BaseModel):
    value: Optional[str] = None
