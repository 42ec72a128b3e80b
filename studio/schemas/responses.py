"""Tagged view of a participant's position on one session.

``Responded`` carries the stored answer; ``NotResponded`` stands in for a
participant with no row. The ``state`` field tells them apart so consumers
never infer it from missing fields.
"""
from typing import Annotated, Literal, Union

from pydantic import Field

from studio.models import ResponseStatus
from studio.schemas.base import CamelModel


class Responded(CamelModel):
    state: Literal["responded"] = "responded"
    id: str
    participant_id: str
    participant_name: str | None = None
    phone_number: str | None = None
    status: ResponseStatus
    admin_override: bool
    updated_at: str


class NotResponded(CamelModel):
    state: Literal["not_responded"] = "not_responded"
    participant_id: str
    participant_name: str | None = None
    phone_number: str | None = None


ResponseView = Annotated[Union[Responded, NotResponded], Field(discriminator="state")]
