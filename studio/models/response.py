"""Response model: a participant's attendance intent for one session."""

from enum import Enum
from uuid import uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from studio.core.timeutil import utc_now_iso


class ResponseStatus(str, Enum):
    joining = "joining"
    not_joining = "not_joining"
    maybe = "maybe"


class Response(SQLModel, table=True):
    """A participant's answer for a session.

    At most one row exists per (session_id, participant_id); the constraint
    lives in the table. Once ``admin_override`` is set the participant can no
    longer change or delete the row.
    """
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("session_id", "participant_id", name="uq_response_pair"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    session_id: str = Field(foreign_key="sessions.id", index=True)
    participant_id: str = Field(foreign_key="users.id", index=True)
    status: ResponseStatus
    admin_override: bool = Field(default=False)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
