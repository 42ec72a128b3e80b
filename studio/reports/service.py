"""Load report inputs from the store and hand them to the aggregator."""
import calendar
from datetime import date
from zoneinfo import ZoneInfo

from sqlmodel import Session, select

from studio.core.errors import ValidationError
from studio.core.timeutil import Clock
from studio.models import ClassSession, Response, Role, User
from studio.reports import aggregator
from studio.schemas.reports import AvailableMonth, MonthlyReport, OverallStats


class ReportService:
    def __init__(self, session: Session, clock: Clock, timezone: str):
        self.session = session
        self.clock = clock
        self.timezone = timezone

    def _active_sessions(self, start: str | None = None, end: str | None = None):
        statement = select(ClassSession).where(ClassSession.is_active == True)  # noqa: E712
        if start:
            statement = statement.where(ClassSession.date >= start)
        if end:
            statement = statement.where(ClassSession.date <= end)
        return list(self.session.exec(statement.order_by(ClassSession.date.desc())).all())

    def _participants(self) -> list[User]:
        return list(self.session.exec(select(User).where(User.role == Role.participant)).all())

    def _responses_for(self, sessions: list[ClassSession]) -> list[Response]:
        if not sessions:
            return []
        ids = [s.id for s in sessions]
        return list(self.session.exec(select(Response).where(Response.session_id.in_(ids))).all())

    def monthly(self, year: int, month: int) -> MonthlyReport:
        if not (1 <= month <= 12) or not (1 <= year <= 9999):
            raise ValidationError("Invalid year or month")

        last_day = calendar.monthrange(year, month)[1]
        sessions = self._active_sessions(
            date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()
        )
        return aggregator.monthly_report(
            year, month, sessions, self._participants(), self._responses_for(sessions)
        )

    def available_months(self) -> list[AvailableMonth]:
        return aggregator.available_months(self._active_sessions())

    def overall(self) -> OverallStats:
        sessions = self._active_sessions()
        today = self.clock.now().astimezone(ZoneInfo(self.timezone)).date()
        return aggregator.overall_stats(
            sessions, self._participants(), self._responses_for(sessions), today
        )
