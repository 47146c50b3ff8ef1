from typing import Optional

from pydantic import BaseModel, EmailStr

from .profile import ProfileFields


class SignupRequest(ProfileFields):
    name: str
    email: EmailStr
    password: str


class VerifyRequest(BaseModel):
    email: EmailStr
    code: str


class ResendCodeRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class CodeDispatchResponse(BaseModel):
    id: str
    email: str
    message: str
    email_sent: bool
    debug_code: Optional[str] = None
