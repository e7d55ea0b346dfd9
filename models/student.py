from pydantic import BaseModel
from typing import Literal, Optional

class Student(BaseModel):
    id: Optional[str] = None  # id of the User this profile belongs to
    name: Optional[str] = None  # copied from the User on every write
    age: str
    parents: str
    phone_number: str
    special_needs: str
    status: Literal["on", "off"]
    studentId: Optional[str] = None
