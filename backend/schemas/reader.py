from typing import List, Optional

from pydantic import Field

from schemas.base import ApiModel


class SendOtpRequest(ApiModel):
    email: str


class VerifyOtpRequest(ApiModel):
    email: str
    otp: str = Field(min_length=4, max_length=10)
    name: Optional[str] = None
    interests: Optional[List[str]] = None


class GoogleLoginRequest(ApiModel):
    token: str


class ReaderUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    interests: Optional[List[str]] = None


class SubscribeRequest(ApiModel):
    email: str
