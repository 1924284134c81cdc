from pydantic import BaseModel, EmailStr, Field
from typing import Optional

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class LoginUser(BaseModel):
    id: int
    name: str
    role: Optional[str] = None

class LoginResponse(BaseModel):
    status: str = "ok"
    user: LoginUser

class SignupRequest(BaseModel):
    employee_name: str = Field(min_length=1)
    employee_email: EmailStr
    password: str = Field(min_length=8)
    role_id: int
    department_id: int
