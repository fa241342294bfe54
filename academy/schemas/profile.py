from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True
