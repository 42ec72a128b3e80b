"""Refresh token registry.

A refresh token is accepted for renewal only while its row exists and has
not expired. Logging out deletes the row. A user may hold several rows, one
per device.
"""

from uuid import uuid4

from sqlmodel import Field, SQLModel

from studio.core.timeutil import utc_now_iso


class RefreshToken(SQLModel, table=True):
    __tablename__ = "refresh_tokens"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    token: str = Field(unique=True, index=True)
    expires_at: str
    created_at: str = Field(default_factory=utc_now_iso)
