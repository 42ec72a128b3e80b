"""User model for admins and participants.

A user is either the studio admin, who signs in with Google and is keyed by
``google_id``, or a participant, who is created by the admin and signs in
with a one-time code sent to ``phone_number``.
"""

from enum import Enum
from uuid import uuid4

from sqlmodel import Field, SQLModel

from studio.core.timeutil import utc_now_iso


class Role(str, Enum):
    admin = "admin"
    participant = "participant"


class User(SQLModel, table=True):
    """An identity record.

    Attributes:
        id: Opaque identifier (UUID text).
        name: Display name.
        email: Google account email. Set for admins only.
        phone_number: Canonical phone number (``+9725XXXXXXXX``). Set for
            participants only and used as their login key.
        google_id: External OAuth subject. The durable join key for admins,
            so an email change on the provider side does not create a
            second account.
        role: ``admin`` or ``participant``. Not changed after creation.
        created_at: ISO-8601 UTC timestamp.
        updated_at: ISO-8601 UTC timestamp.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str | None = Field(default=None, unique=True)
    phone_number: str | None = Field(default=None, unique=True, index=True)
    google_id: str | None = Field(default=None, unique=True)
    role: Role = Field(index=True)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
