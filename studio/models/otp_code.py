"""One-time login code sent by SMS."""

from uuid import uuid4

from sqlmodel import Field, SQLModel

from studio.core.timeutil import utc_now_iso


class OtpCode(SQLModel, table=True):
    """A six-digit code proving possession of a phone number.

    Issuing a new code removes every earlier code for the same number, so
    ``phone_number`` is unique in this table.
    """
    __tablename__ = "otp_codes"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    phone_number: str = Field(unique=True, index=True)
    code: str
    expires_at: str
    used: bool = Field(default=False)
    created_at: str = Field(default_factory=utc_now_iso)
