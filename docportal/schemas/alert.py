from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from docportal.models.choices import Priority


class AlertCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    level: Priority = Priority.MEDIUM


class Alert(AlertCreate):
    id: int
    created_by: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
