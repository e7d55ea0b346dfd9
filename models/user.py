from pydantic import BaseModel
from typing import Literal, Optional

class User(BaseModel):
    id: Optional[str] = None
    name: str
    email: str
    user: str
    pwd: str  # write-only; bcrypt hash at rest
    level: Literal["1", "2"]
    status: Literal["on", "off"]
