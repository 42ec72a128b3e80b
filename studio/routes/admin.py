"""Admin routes: participant roster, session schedule and response overrides."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from studio.core.config import Settings
from studio.core.deps import (
    ClaimsDep,
    ClockDep,
    LedgerDep,
    SessionDep,
    SettingsDep,
    require_role,
)
from studio.core.errors import ConflictError, NotFoundError
from studio.core.timeutil import combine_local, to_iso
from studio.identity.otp import canonical_phone
from studio.models import ClassSession, OtpCode, RefreshToken, Response, Role, User
from studio.schemas.auth import MessageResult
from studio.schemas.participants import ParticipantIn, ParticipantOut
from studio.schemas.sessions import (
    AdminSessionDetail,
    AdminSessionSummary,
    SessionIn,
    SessionOut,
    StatusIn,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_role(Role.admin))],
)


def session_out(settings: Settings, class_session: ClassSession) -> dict:
    return SessionOut(
        id=class_session.id,
        title=class_session.title,
        description=class_session.description,
        date=class_session.date,
        time=class_session.time,
        starts_at=class_session.starts_at,
        show_responses_to_participants=class_session.show_responses_to_participants,
        share_url=settings.share_url(class_session.id),
    ).model_dump()


def participant_out(user: User) -> ParticipantOut:
    return ParticipantOut(
        id=user.id, name=user.name, phone_number=user.phone_number, created_at=user.created_at
    )


def get_participant(session: Session, participant_id: str) -> User:
    user = session.get(User, participant_id)
    if user is None or user.role != Role.participant:
        raise NotFoundError("Participant not found")
    return user


def commit_or_conflict(session: Session, message: str) -> None:
    """Commit, turning a uniqueness violation into a 409."""
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(message) from None


# --- Participants -----------------------------------------------------------


@router.post("/participants", response_model=ParticipantOut, status_code=status.HTTP_201_CREATED)
async def create_participant(body: ParticipantIn, session: SessionDep, clock: ClockDep):
    """
    Register a participant.

    The phone number is stored in canonical form. Returns 409 if another
    user already has it.
    """
    phone_number = canonical_phone(body.phone_number)
    existing = session.exec(select(User).where(User.phone_number == phone_number)).first()
    if existing:
        raise ConflictError("Participant with this phone number already exists")

    now = to_iso(clock.now())
    user = User(
        name=body.name,
        phone_number=phone_number,
        role=Role.participant,
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    commit_or_conflict(session, "Participant with this phone number already exists")
    session.refresh(user)
    return participant_out(user)


@router.get("/participants", response_model=list[ParticipantOut])
async def list_participants(session: SessionDep):
    """List participants, newest first."""
    statement = (
        select(User).where(User.role == Role.participant).order_by(User.created_at.desc())
    )
    return [participant_out(u) for u in session.exec(statement).all()]


@router.put("/participants/{participant_id}", response_model=ParticipantOut)
async def update_participant(
    participant_id: str, body: ParticipantIn, session: SessionDep, clock: ClockDep
):
    """Rename a participant or change their phone number."""
    phone_number = canonical_phone(body.phone_number)
    clash = session.exec(
        select(User).where(User.phone_number == phone_number).where(User.id != participant_id)
    ).first()
    if clash:
        raise ConflictError("Another participant already has this phone number")

    user = get_participant(session, participant_id)
    user.name = body.name
    user.phone_number = phone_number
    user.updated_at = to_iso(clock.now())
    session.add(user)
    commit_or_conflict(session, "Another participant already has this phone number")
    session.refresh(user)
    return participant_out(user)


@router.delete("/participants/{participant_id}", response_model=MessageResult)
async def delete_participant(participant_id: str, session: SessionDep):
    """
    Remove a participant.

    Their responses, refresh tokens and pending login codes go with them.
    """
    user = get_participant(session, participant_id)

    for model, clause in (
        (Response, Response.participant_id == user.id),
        (RefreshToken, RefreshToken.user_id == user.id),
        (OtpCode, OtpCode.phone_number == user.phone_number),
    ):
        for row in session.exec(select(model).where(clause)).all():
            session.delete(row)
    session.flush()
    session.delete(user)
    session.commit()
    return MessageResult(message="Participant deleted successfully")


# --- Sessions ---------------------------------------------------------------


@router.post("/sessions", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def create_session(
    body: SessionIn,
    claims: ClaimsDep,
    session: SessionDep,
    settings: SettingsDep,
    clock: ClockDep,
):
    """Schedule a class. ``startsAt`` is derived from the date and time."""
    day = body.date.isoformat()
    now = to_iso(clock.now())
    class_session = ClassSession(
        title=body.title,
        description=body.description or None,
        date=day,
        time=body.time,
        starts_at=to_iso(combine_local(day, body.time, settings.studio_timezone)),
        created_by_id=claims.user_id,
        show_responses_to_participants=body.show_responses_to_participants,
        created_at=now,
        updated_at=now,
    )
    session.add(class_session)
    session.commit()
    session.refresh(class_session)
    return session_out(settings, class_session)


@router.get("/sessions", response_model=list[AdminSessionSummary])
async def list_sessions(session: SessionDep, settings: SettingsDep, ledger: LedgerDep):
    """Active sessions, latest first, with response counts per status."""
    statement = (
        select(ClassSession)
        .where(ClassSession.is_active == True)  # noqa: E712
        .order_by(ClassSession.starts_at.desc())
    )
    return [
        AdminSessionSummary(
            **session_out(settings, s), response_counts=ledger.counts(s.id)
        )
        for s in session.exec(statement).all()
    ]


@router.get("/sessions/{session_id}", response_model=AdminSessionDetail)
async def session_detail(session_id: str, settings: SettingsDep, ledger: LedgerDep):
    """
    Show a session with every participant's position.

    Participants who have not answered appear with state ``not_responded``.
    """
    class_session = ledger.get_active_session(session_id)
    return AdminSessionDetail(
        **session_out(settings, class_session), responses=ledger.roster(session_id)
    )


@router.put("/sessions/{session_id}", response_model=SessionOut)
async def update_session(
    session_id: str,
    body: SessionIn,
    ledger: LedgerDep,
    session: SessionDep,
    settings: SettingsDep,
    clock: ClockDep,
):
    """Edit a session. ``startsAt`` is recomputed from the new date and time."""
    class_session = ledger.get_active_session(session_id)
    day = body.date.isoformat()
    class_session.title = body.title
    class_session.description = body.description or None
    class_session.date = day
    class_session.time = body.time
    class_session.starts_at = to_iso(combine_local(day, body.time, settings.studio_timezone))
    class_session.show_responses_to_participants = body.show_responses_to_participants
    class_session.updated_at = to_iso(clock.now())
    session.add(class_session)
    session.commit()
    session.refresh(class_session)
    return session_out(settings, class_session)


@router.delete("/sessions/{session_id}", response_model=MessageResult)
async def delete_session(
    session_id: str, ledger: LedgerDep, session: SessionDep, clock: ClockDep
):
    """Soft-delete a session. Its responses are kept for reporting."""
    class_session = ledger.get_active_session(session_id)
    class_session.is_active = False
    class_session.updated_at = to_iso(clock.now())
    session.add(class_session)
    session.commit()
    return MessageResult(message="Session deleted successfully")


@router.put("/sessions/{session_id}/responses/{participant_id}", response_model=MessageResult)
async def override_response(session_id: str, participant_id: str, body: StatusIn, ledger: LedgerDep):
    """
    Set a participant's response as the admin.

    Allowed at any time, even after the session started. The response is
    locked against further changes by the participant.
    """
    ledger.override(session_id, participant_id, body.status)
    return MessageResult(message="Response updated successfully")
