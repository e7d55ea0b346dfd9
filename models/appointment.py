from pydantic import BaseModel
from typing import Optional

class Appointment(BaseModel):
    id: Optional[str] = None
    specialty: str
    comments: str
    date: str  # ISO-8601
    student: str
    professional: str
