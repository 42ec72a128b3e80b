"""Class session model.

This module defines the ClassSession model, a single scheduled class that
participants respond to. It is named ``ClassSession`` to keep it apart from
the database ``Session``; the table is ``sessions``.
"""

from uuid import uuid4

from sqlmodel import Field, SQLModel

from studio.core.timeutil import utc_now_iso


class ClassSession(SQLModel, table=True):
    """A scheduled class instance.

    Attributes:
        id: Opaque identifier (UUID text).
        title: Class title.
        description: Optional free text.
        date: Calendar date, ``YYYY-MM-DD``, in the studio's timezone.
        time: Wall-clock start time, ``HH:MM``, in the studio's timezone.
        starts_at: ``date`` + ``time`` as an ISO-8601 UTC instant. Always
            recomputed when either part changes; used for ordering and for
            the participant edit window.
        created_by_id: Admin who created the session.
        show_responses_to_participants: If True, participants can see each
            other's responses.
        is_active: False once soft-deleted. Inactive sessions are hidden
            from default queries but their responses are kept.
    """
    __tablename__ = "sessions"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    description: str | None = None
    date: str = Field(index=True)
    time: str
    starts_at: str = Field(index=True)
    created_by_id: str = Field(foreign_key="users.id")
    show_responses_to_participants: bool = Field(default=False)
    is_active: bool = Field(default=True, index=True)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
