from pydantic import BaseModel
from typing import Literal, Optional

class Professional(BaseModel):
    id: Optional[str] = None
    name: str
    specialty: str
    contact: str
    phone_number: str
    status: Literal["on", "off"]
