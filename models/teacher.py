from pydantic import BaseModel
from typing import Literal, Optional

class Teacher(BaseModel):
    id: Optional[str] = None  # id of the User this profile belongs to
    name: Optional[str] = None  # copied from the User on every write
    school_disciplines: str
    contact: str
    phone_number: str
    status: Literal["on", "off"]
