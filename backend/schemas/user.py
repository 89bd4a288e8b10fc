from typing import Optional

from pydantic import Field

from schemas.base import ApiModel

MIN_PASSWORD_LENGTH = 6


class LoginRequest(ApiModel):
    email: str
    password: str


class ProfileUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = None


class PasswordChange(ApiModel):
    current_password: str
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class UserCreate(ApiModel):
    name: str = Field(min_length=1, max_length=100)
    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    role: str = "writer"


class UserUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = None
    role: Optional[str] = None


class PasswordReset(ApiModel):
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class DirectPublishToggle(ApiModel):
    enabled: bool
