from pydantic import BaseModel

class LoginIn(BaseModel):
    email: str
    senha: str

class LoginOut(BaseModel):
    level: str
