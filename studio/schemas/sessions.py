import datetime as dt

from pydantic import Field, field_validator

from studio.models import ResponseStatus
from studio.schemas.base import CamelModel
from studio.schemas.responses import ResponseView

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


class SessionIn(CamelModel):
    title: str = Field(min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    date: dt.date
    time: str = Field(pattern=TIME_PATTERN)
    show_responses_to_participants: bool = False

    @field_validator("time")
    @classmethod
    def pad_time(cls, value: str) -> str:
        """Store ``9:00`` as ``09:00`` so identical times group together."""
        hours, minutes = value.split(":")
        return f"{int(hours):02d}:{minutes}"


class SessionOut(CamelModel):
    id: str
    title: str
    description: str | None
    date: str
    time: str
    starts_at: str
    show_responses_to_participants: bool
    share_url: str | None = None


class ResponseCounts(CamelModel):
    joining: int = 0
    not_joining: int = 0
    maybe: int = 0


class AdminSessionSummary(SessionOut):
    response_counts: ResponseCounts


class AdminSessionDetail(SessionOut):
    responses: list[ResponseView]


class ParticipantSessionOut(SessionOut):
    my_response: ResponseView
    can_edit: bool


class ParticipantSessionDetail(ParticipantSessionOut):
    other_responses: list[ResponseView] | None


class StatusIn(CamelModel):
    status: ResponseStatus
