from pydantic import BaseModel
from typing import Optional

class Event(BaseModel):
    id: Optional[str] = None
    description: str
    comments: str
    date: str  # ISO-8601
