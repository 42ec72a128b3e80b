"""Participant routes: upcoming sessions and the participant's own response."""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlmodel import select

from studio.attendance.ledger import AttendanceLedger, responded_view
from studio.core.deps import LedgerDep, ParticipantDep, SessionDep, SettingsDep, require_role
from studio.models import ClassSession, Role, User
from studio.schemas.auth import MessageResult
from studio.schemas.responses import Responded
from studio.schemas.sessions import (
    ParticipantSessionDetail,
    ParticipantSessionOut,
    StatusIn,
)

router = APIRouter(
    prefix="/participants",
    tags=["participants"],
    dependencies=[Depends(require_role(Role.participant))],
)


def _session_fields(class_session: ClassSession, url: str) -> dict:
    return {
        "id": class_session.id,
        "title": class_session.title,
        "description": class_session.description,
        "date": class_session.date,
        "time": class_session.time,
        "starts_at": class_session.starts_at,
        "show_responses_to_participants": class_session.show_responses_to_participants,
        "share_url": url,
    }


def _can_edit(ledger: AttendanceLedger, class_session: ClassSession, participant: User) -> bool:
    return ledger.can_edit(class_session, ledger.find(class_session.id, participant.id))


@router.get("/sessions", response_model=list[ParticipantSessionOut])
async def my_sessions(
    participant: ParticipantDep, session: SessionDep, ledger: LedgerDep, settings: SettingsDep
):
    """Active sessions, latest first, each with the caller's own response."""
    statement = (
        select(ClassSession)
        .where(ClassSession.is_active == True)  # noqa: E712
        .order_by(ClassSession.starts_at.desc())
    )
    return [
        ParticipantSessionOut(
            **_session_fields(s, settings.share_url(s.id)),
            my_response=ledger.own_view(s.id, participant),
            can_edit=_can_edit(ledger, s, participant),
        )
        for s in session.exec(statement).all()
    ]


@router.get("/sessions/{session_id}", response_model=ParticipantSessionDetail)
async def session_detail(
    session_id: str, participant: ParticipantDep, ledger: LedgerDep, settings: SettingsDep
):
    """
    Session detail for the caller.

    ``otherResponses`` lists the other participants' answers when the admin
    enabled it for this session, and is null otherwise.
    """
    class_session = ledger.get_active_session(session_id)
    return ParticipantSessionDetail(
        **_session_fields(class_session, settings.share_url(session_id)),
        my_response=ledger.own_view(session_id, participant),
        other_responses=ledger.others_visible_to(class_session, participant.id),
        can_edit=_can_edit(ledger, class_session, participant),
    )


@router.post("/sessions/{session_id}/responses", response_model=Responded)
async def submit_response(
    session_id: str, body: StatusIn, participant: ParticipantDep, ledger: LedgerDep
):
    """
    Answer or change the answer for a session.

    Returns 201 when the response is new and 200 when it replaced an
    earlier one. Fails once the session has started or after the admin has
    set the response.
    """
    response, created = ledger.submit(session_id, participant.id, body.status)
    view = responded_view(response, participant)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        content=view.model_dump(mode="json", by_alias=True),
    )


@router.delete("/sessions/{session_id}/responses", response_model=MessageResult)
async def delete_response(session_id: str, participant: ParticipantDep, ledger: LedgerDep):
    """Withdraw the caller's response while the session is still open."""
    ledger.withdraw(session_id, participant.id)
    return MessageResult(message="Response deleted successfully")
