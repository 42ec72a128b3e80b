from studio.models.class_session import ClassSession
from studio.models.otp_code import OtpCode
from studio.models.refresh_token import RefreshToken
from studio.models.response import Response, ResponseStatus
from studio.models.user import Role, User

__all__ = [
    "User",
    "Role",
    "ClassSession",
    "Response",
    "ResponseStatus",
    "OtpCode",
    "RefreshToken",
]
