from pydantic import Field

from studio.models import Role
from studio.schemas.base import CamelModel


class OtpRequest(CamelModel):
    phone_number: str = Field(min_length=1, max_length=32)


class OtpRequestResult(CamelModel):
    message: str
    debug_otp: str | None = None


class OtpVerify(CamelModel):
    phone_number: str = Field(min_length=1, max_length=32)
    code: str = Field(max_length=32)


class GoogleCallback(CamelModel):
    code: str = Field(min_length=1)


class GoogleAuthUrl(CamelModel):
    auth_url: str


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class AccessTokenResult(CamelModel):
    access_token: str


class UserOut(CamelModel):
    id: str
    name: str
    role: Role
    email: str | None = None
    phone_number: str | None = None


class LoginResponse(CamelModel):
    access_token: str
    refresh_token: str
    user: UserOut


class MessageResult(CamelModel):
    message: str
