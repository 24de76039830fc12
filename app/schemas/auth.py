from typing import Optional
from pydantic import BaseModel, EmailStr
from app.schemas.user import UserProfile
from app.schemas.gym import Gym


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SessionInfo(BaseModel):
    uid: str
    email: Optional[str] = None
    profile: UserProfile
    gym: Optional[Gym] = None
    console: str  # "super-admin" | "dashboard"


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    session: SessionInfo


class PasswordResetResult(BaseModel):
    email: str
    sent: bool = True
