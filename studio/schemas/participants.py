from pydantic import Field

from studio.schemas.base import CamelModel


class ParticipantIn(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    phone_number: str = Field(min_length=1, max_length=32)


class ParticipantOut(CamelModel):
    id: str
    name: str
    phone_number: str | None
    created_at: str | None = None
