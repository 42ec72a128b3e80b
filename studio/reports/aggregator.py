"""Attendance rollups.

Everything here is a pure function of the rows passed in: sessions in the
window, the participant roster, and the *joining* responses for those
sessions. Nothing is written back and nothing is cached between calls.

Rates are percentages rounded half up. Any rate whose denominator would be
zero is 0, so results never contain NaN or infinity.
"""
from collections import Counter
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from studio.models import ClassSession, Response, ResponseStatus, User
from studio.schemas.reports import (
    AvailableMonth,
    DayCount,
    Insights,
    MonthlyReport,
    OverallStats,
    ParticipantStat,
    SessionStat,
    TimeCount,
)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
TOP_N = 3
RECENT_DAYS = 30


def half_up(value: Decimal, ndigits: int = 0):
    """Round halves away from zero, returning an int when ``ndigits`` is 0."""
    rounded = value.quantize(Decimal(1).scaleb(-ndigits), rounding=ROUND_HALF_UP)
    return float(rounded) if ndigits else int(rounded)


def percent(numerator: int, denominator: int, ndigits: int = 0) -> float:
    if numerator == 0 or denominator == 0:
        return 0
    return half_up(Decimal(numerator) * 100 / denominator, ndigits)


def mean(total: int, count: int) -> int:
    return half_up(Decimal(total) / count) if count else 0


def joining_only(responses: Iterable[Response]) -> list[Response]:
    return [r for r in responses if ResponseStatus(r.status) == ResponseStatus.joining]


def weekday_name(day: str) -> str:
    return WEEKDAYS[date.fromisoformat(day).weekday()]


def _top(counter: Counter) -> list[tuple[str, int]]:
    # sorted() is stable, so ties keep first-seen order
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)[:TOP_N]


def popular_days(sessions: list[ClassSession]) -> list[DayCount]:
    counter = Counter(weekday_name(s.date) for s in sessions)
    return [DayCount(day=day, count=count) for day, count in _top(counter)]


def popular_times(sessions: list[ClassSession]) -> list[TimeCount]:
    counter = Counter(s.time for s in sessions)
    return [TimeCount(time=time, count=count) for time, count in _top(counter)]


def participant_stats(
    participants: list[User], sessions: list[ClassSession], joining: list[Response]
) -> list[ParticipantStat]:
    """Per-participant attendance, most active first."""
    attended = Counter(r.participant_id for r in joining)
    stats = [
        ParticipantStat(
            id=p.id,
            name=p.name,
            phone_number=p.phone_number,
            attended_sessions=attended[p.id],
            total_sessions=len(sessions),
            attendance_rate=percent(attended[p.id], len(sessions), 2),
        )
        for p in participants
    ]
    stats.sort(key=lambda s: s.attended_sessions, reverse=True)
    return stats


def session_stats(
    sessions: list[ClassSession], participants: list[User], joining: list[Response]
) -> list[SessionStat]:
    names = {p.id: p.name for p in participants}
    by_session: dict[str, list[Response]] = {}
    for r in joining:
        by_session.setdefault(r.session_id, []).append(r)

    details = []
    for s in sessions:
        attendees = by_session.get(s.id, [])
        details.append(
            SessionStat(
                id=s.id,
                title=s.title,
                date=s.date,
                time=s.time,
                attendees=len(attendees),
                attendee_names=[names[r.participant_id] for r in attendees if r.participant_id in names],
                attendance_rate=percent(len(attendees), len(participants)),
            )
        )
    return details


def monthly_report(
    year: int,
    month: int,
    sessions: list[ClassSession],
    participants: list[User],
    responses: list[Response],
) -> MonthlyReport:
    """Build the report for one calendar month.

    Args:
        sessions: Active sessions dated within the month.
        participants: All participants.
        responses: Responses for those sessions; non-joining ones are ignored.
    """
    if not sessions:
        return MonthlyReport(
            year=year,
            month=month,
            total_sessions=0,
            participant_stats=[],
            session_details=[],
            insights=Insights(
                total_participants=0,
                total_attendance=0,
                average_attendance=0,
                most_active_participant=None,
                attendance_rate=0,
                popular_days=[],
                popular_times=[],
            ),
        )

    session_ids = {s.id for s in sessions}
    joining = [r for r in joining_only(responses) if r.session_id in session_ids]

    stats = participant_stats(participants, sessions, joining)
    most_active = stats[0] if stats and stats[0].attended_sessions > 0 else None

    return MonthlyReport(
        year=year,
        month=month,
        total_sessions=len(sessions),
        participant_stats=stats,
        session_details=session_stats(sessions, participants, joining),
        insights=Insights(
            total_participants=len(participants),
            total_attendance=len(joining),
            average_attendance=mean(len(joining), len(sessions)),
            most_active_participant=most_active,
            attendance_rate=percent(len(joining), len(sessions) * len(participants)),
            popular_days=popular_days(sessions),
            popular_times=popular_times(sessions),
        ),
    )


def available_months(sessions: list[ClassSession]) -> list[AvailableMonth]:
    """Months that have at least one session, newest first."""
    counter = Counter(s.date[:7] for s in sessions)
    return [
        AvailableMonth(year=int(key[:4]), month=int(key[5:7]), session_count=count)
        for key, count in sorted(counter.items(), reverse=True)
    ]


def overall_stats(
    sessions: list[ClassSession],
    participants: list[User],
    responses: list[Response],
    today: date,
) -> OverallStats:
    """All-time totals over active sessions."""
    session_ids = {s.id for s in sessions}
    responses = [r for r in responses if r.session_id in session_ids]
    joining = joining_only(responses)
    cutoff = (today - timedelta(days=RECENT_DAYS)).isoformat()
    possible = len(sessions) * len(participants)

    return OverallStats(
        total_sessions=len(sessions),
        total_participants=len(participants),
        total_responses=len(responses),
        total_attendance=len(joining),
        recent_sessions=sum(1 for s in sessions if s.date >= cutoff),
        overall_attendance_rate=percent(len(joining), possible),
        response_rate=percent(len(responses), possible),
        average_attendance_per_session=mean(len(joining), len(sessions)),
    )
