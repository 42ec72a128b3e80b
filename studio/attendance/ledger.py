"""Attendance ledger: the response lifecycle for each session/participant pair.

Per pair the ledger is in one of three states::

    NoResponse --submit--> Responded(s) --update--> Responded(s')
         ^                      |
         +-------delete---------+
    any state --admin override--> LockedByAdmin(s)

Participant transitions are only allowed while the session has not started
(``starts_at`` strictly after now) and the row is not locked by the admin.
Admin overrides are allowed at any time and always lock the row. A locked
row can only be changed by another override.

The pair is unique in the store. When two submissions race, the loser's
insert fails on the constraint and is applied as an update to the winner's
row instead.
"""
import logging
from collections import Counter

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from studio.core.errors import ForbiddenError, NotFoundError, ValidationError
from studio.core.timeutil import Clock, to_iso
from studio.models import ClassSession, Response, ResponseStatus, Role, User
from studio.schemas.responses import NotResponded, Responded, ResponseView
from studio.schemas.sessions import ResponseCounts

logger = logging.getLogger(__name__)


class SessionStartedError(ValidationError):
    default_message = "Session has already started, responses are locked"


class ResponseLockedError(ForbiddenError):
    default_message = "Response has been set by admin and cannot be changed"


def responded_view(response: Response, participant: User | None = None) -> Responded:
    return Responded(
        id=response.id,
        participant_id=response.participant_id,
        participant_name=participant.name if participant else None,
        phone_number=participant.phone_number if participant else None,
        status=response.status,
        admin_override=response.admin_override,
        updated_at=response.updated_at,
    )


def not_responded_view(participant: User) -> NotResponded:
    return NotResponded(
        participant_id=participant.id,
        participant_name=participant.name,
        phone_number=participant.phone_number,
    )


class AttendanceLedger:
    def __init__(self, session: Session, clock: Clock):
        self.session = session
        self.clock = clock

    # -- lookups -----------------------------------------------------------

    def get_active_session(self, session_id: str) -> ClassSession:
        class_session = self.session.get(ClassSession, session_id)
        if class_session is None or not class_session.is_active:
            raise NotFoundError("Session not found")
        return class_session

    def find(self, session_id: str, participant_id: str) -> Response | None:
        statement = (
            select(Response)
            .where(Response.session_id == session_id)
            .where(Response.participant_id == participant_id)
        )
        return self.session.exec(statement).first()

    def has_started(self, class_session: ClassSession) -> bool:
        """True once now has reached the session's start instant."""
        return class_session.starts_at <= to_iso(self.clock.now())

    def can_edit(self, class_session: ClassSession, response: Response | None) -> bool:
        if self.has_started(class_session):
            return False
        return response is None or not response.admin_override

    # -- participant transitions ------------------------------------------

    def _guard_participant_edit(self, class_session: ClassSession) -> None:
        if self.has_started(class_session):
            raise SessionStartedError()

    def _apply(self, response: Response, status: ResponseStatus, admin_override: bool) -> Response:
        response.status = status
        response.admin_override = admin_override
        response.updated_at = to_iso(self.clock.now())
        self.session.add(response)
        self.session.commit()
        self.session.refresh(response)
        return response

    def _insert(
        self,
        session_id: str,
        participant_id: str,
        status: ResponseStatus,
        admin_override: bool,
    ) -> Response | None:
        """Insert a new row, or return None if the pair already exists."""
        now = to_iso(self.clock.now())
        response = Response(
            session_id=session_id,
            participant_id=participant_id,
            status=status,
            admin_override=admin_override,
            created_at=now,
            updated_at=now,
        )
        self.session.add(response)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info(
                f"Response for session {session_id} / participant {participant_id} "
                "was written concurrently, updating instead"
            )
            return None
        self.session.refresh(response)
        return response

    def submit(
        self, session_id: str, participant_id: str, status: ResponseStatus
    ) -> tuple[Response, bool]:
        """Create or update the participant's own response.

        Returns:
            ``(response, created)``.

        Raises:
            NotFoundError: unknown or deleted session.
            SessionStartedError: the session has started.
            ResponseLockedError: the admin has overridden this response.
        """
        class_session = self.get_active_session(session_id)
        self._guard_participant_edit(class_session)

        existing = self.find(session_id, participant_id)
        if existing is None:
            created = self._insert(session_id, participant_id, status, admin_override=False)
            if created is not None:
                logger.info(f"Participant {participant_id} responded {status.value} to {session_id}")
                return created, True
            existing = self.find(session_id, participant_id)

        if existing.admin_override:
            raise ResponseLockedError()
        return self._apply(existing, status, admin_override=False), False

    def withdraw(self, session_id: str, participant_id: str) -> None:
        """Delete the participant's own response."""
        class_session = self.get_active_session(session_id)
        self._guard_participant_edit(class_session)

        existing = self.find(session_id, participant_id)
        if existing is None:
            raise NotFoundError("Response not found")
        if existing.admin_override:
            raise ResponseLockedError("Cannot delete admin-set response")

        self.session.delete(existing)
        self.session.commit()
        logger.info(f"Participant {participant_id} withdrew from {session_id}")

    # -- admin transition -------------------------------------------------

    def override(
        self, session_id: str, participant_id: str, status: ResponseStatus
    ) -> Response:
        """Set a participant's response as the admin and lock it."""
        self.get_active_session(session_id)
        participant = self.session.get(User, participant_id)
        if participant is None or participant.role != Role.participant:
            raise NotFoundError("Participant not found")

        existing = self.find(session_id, participant_id)
        if existing is None:
            created = self._insert(session_id, participant_id, status, admin_override=True)
            if created is not None:
                response = created
            else:
                response = self._apply(
                    self.find(session_id, participant_id), status, admin_override=True
                )
        else:
            response = self._apply(existing, status, admin_override=True)

        logger.info(f"Admin set participant {participant_id} to {status.value} for {session_id}")
        return response

    # -- reads ------------------------------------------------------------

    def participants(self) -> list[User]:
        statement = select(User).where(User.role == Role.participant).order_by(User.name)
        return list(self.session.exec(statement).all())

    def roster(self, session_id: str) -> list[ResponseView]:
        """Every participant's position on a session.

        Stored responses come first, followed by a ``NotResponded`` entry for
        each participant without a row.
        """
        rows = self.session.exec(
            select(Response, User)
            .join(User, User.id == Response.participant_id)
            .where(Response.session_id == session_id)
            .order_by(Response.updated_at)
        ).all()

        views: list[ResponseView] = [responded_view(r, u) for r, u in rows]
        answered = {r.participant_id for r, _ in rows}
        views.extend(
            not_responded_view(p) for p in self.participants() if p.id not in answered
        )
        return views

    def own_view(self, session_id: str, participant: User) -> ResponseView:
        response = self.find(session_id, participant.id)
        if response is None:
            return not_responded_view(participant)
        return responded_view(response, participant)

    def others_visible_to(
        self, class_session: ClassSession, participant_id: str
    ) -> list[ResponseView] | None:
        """Other participants' responses, or None if the session hides them."""
        if not class_session.show_responses_to_participants:
            return None
        rows = self.session.exec(
            select(Response, User)
            .join(User, User.id == Response.participant_id)
            .where(Response.session_id == class_session.id)
            .where(Response.participant_id != participant_id)
            .order_by(Response.updated_at)
        ).all()
        # Phone numbers of other participants are not exposed
        return [
            responded_view(r, u).model_copy(update={"phone_number": None})
            for r, u in rows
        ]

    def counts(self, session_id: str) -> ResponseCounts:
        statuses = self.session.exec(
            select(Response.status).where(Response.session_id == session_id)
        ).all()
        tally = Counter(ResponseStatus(s).value for s in statuses)
        return ResponseCounts(**tally)
