"""
Pydantic schemas for accounts and password reset.
Request bodies keep the camelCase names the web client sends.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class _EmailBody(_Body):
    email: EmailStr

    @field_validator("email", mode="after")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class AdminCreate(_EmailBody):
    username: str = Field(..., min_length=1, max_length=100)
    contact_number: str = Field(..., alias="contactNumber", min_length=1, max_length=30)
    password: str = Field(..., min_length=1)


class UserCreate(AdminCreate):
    name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(_Body):
    # Either the username or the email address
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(_EmailBody):
    pass


class ResetPasswordRequest(_EmailBody):
    otp: str = Field(..., min_length=1, max_length=6)
    new_password: str = Field(..., alias="newPassword", min_length=1)
