"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(default="", max_length=100)
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=128)
    username: str = Field(default="", max_length=64)


class LoginRequest(BaseModel):
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=128)


class VerifyEmailRequest(BaseModel):
    otp: str = Field(default="", max_length=6)


class SendResetOtpRequest(BaseModel):
    email: str = Field(default="", max_length=320)


class ResetPasswordRequest(BaseModel):
    email: str = Field(default="", max_length=320)
    otp: str = Field(default="", max_length=6)
    new_password: str = Field(default="", max_length=128, alias="newPassword")

    model_config = {"populate_by_name": True}


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    username: str
    is_email_verified: bool


class AuthResult(BaseModel):
    user: UserResponse
    token: str = Field(exclude=True)


class UserPayload(BaseModel):
    user: UserResponse
