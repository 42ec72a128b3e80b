from studio.schemas.base import CamelModel


class ParticipantStat(CamelModel):
    id: str
    name: str
    phone_number: str | None
    attended_sessions: int
    total_sessions: int
    attendance_rate: float


class SessionStat(CamelModel):
    id: str
    title: str
    date: str
    time: str
    attendees: int
    attendee_names: list[str]
    attendance_rate: float


class DayCount(CamelModel):
    day: str
    count: int


class TimeCount(CamelModel):
    time: str
    count: int


class Insights(CamelModel):
    total_participants: int
    total_attendance: int
    average_attendance: int
    most_active_participant: ParticipantStat | None
    attendance_rate: float
    popular_days: list[DayCount]
    popular_times: list[TimeCount]


class MonthlyReport(CamelModel):
    year: int
    month: int
    total_sessions: int
    participant_stats: list[ParticipantStat]
    session_details: list[SessionStat]
    insights: Insights


class AvailableMonth(CamelModel):
    year: int
    month: int
    session_count: int


class OverallStats(CamelModel):
    total_sessions: int
    total_participants: int
    total_responses: int
    total_attendance: int
    recent_sessions: int
    overall_attendance_rate: float
    response_rate: float
    average_attendance_per_session: int
