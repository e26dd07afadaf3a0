"""Authentication and profile schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.services.auth_service import MIN_PASSWORD_LENGTH


class SignupRequest(BaseModel):
    """Signup request; user_id is assigned by the database"""
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="Email (unique)")
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, description="Password, at least 8 characters")
    image_url: Optional[str] = Field(None, max_length=500, description="Avatar URL")


class SignupResponse(BaseModel):
    success: bool
    message: str
    user_id: int | None = None


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., description="Password")


class LoginResponse(BaseModel):
    success: bool
    message: str
    user_id: int | None = None
    name: str | None = None


class LogoutResponse(BaseModel):
    success: bool
    message: str


class SessionInfoResponse(BaseModel):
    authenticated: bool
    user_id: int | None = None


class UserInfoResponse(BaseModel):
    """Current user's profile"""
    user_id: int
    name: str
    email: str
    role: str
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProfileUpdateRequest(BaseModel):
    """Fields left out are not changed; an empty image_url clears the avatar"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, description="New password")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class MessageResponse(BaseModel):
    success: bool
    message: str
