"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from studio.core.config import Settings, get_settings
from studio.core.database import get_session
from studio.core.deps import get_clock, get_oauth_client, get_sms_sender
from studio.core.security import TokenService
from studio.core.timeutil import Clock, combine_local, to_iso
from studio.identity.google import GoogleProfile
from studio.identity.resolver import claims_for
from studio.identity.sms import SmsSender
from studio.main import app
from studio.models import ClassSession, Role, User

ADMIN_EMAIL = "owner@studio.test"
NOW = datetime(2031, 3, 10, 8, 0, tzinfo=UTC)


class FrozenClock(Clock):
    """A clock that only moves when a test moves it."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment = self.moment + timedelta(**kwargs)


class FakeGoogleClient:
    """Stands in for the Google OAuth exchange."""

    def __init__(self):
        self.profiles: dict[str, GoogleProfile] = {}

    def authorization_url(self) -> str:
        return "https://accounts.google.com/o/oauth2/auth?client_id=test"

    def fetch_profile(self, code: str) -> GoogleProfile | None:
        return self.profiles.get(code)


class RecordingSmsSender(SmsSender):
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def deliver(self, phone_number: str, message: str) -> None:
        self.sent.append((phone_number, message))


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    return Settings(
        _env_file=None,
        environment="testing",
        admin_email=ADMIN_EMAIL,
        jwt_secret="test-access-secret",
        jwt_refresh_secret="test-refresh-secret",
        studio_timezone="UTC",
        frontend_url="https://studio.test",
    )


@pytest.fixture(name="clock")
def clock_fixture() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture(name="tokens")
def tokens_fixture(settings: Settings) -> TokenService:
    return TokenService(settings)


@pytest.fixture(name="google")
def google_fixture() -> FakeGoogleClient:
    return FakeGoogleClient()


@pytest.fixture(name="sms")
def sms_fixture() -> RecordingSmsSender:
    return RecordingSmsSender()


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    settings: Settings,
    clock: FrozenClock,
    google: FakeGoogleClient,
    sms: RecordingSmsSender,
):
    """Create a test client with the test database and collaborators."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_oauth_client] = lambda: google
    app.dependency_overrides[get_sms_sender] = lambda: sms
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="admin_user")
def admin_user_fixture(session: Session) -> User:
    user = User(
        name="Studio Owner",
        email=ADMIN_EMAIL,
        google_id="google-sub-1",
        role=Role.admin,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="participant")
def participant_fixture(session: Session) -> User:
    user = User(name="Dana", phone_number="+972501234567", role=Role.participant)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="other_participant")
def other_participant_fixture(session: Session) -> User:
    user = User(name="Yael", phone_number="+972521112222", role=Role.participant)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def bearer(tokens: TokenService, user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens.issue_access(claims_for(user))}"}


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(tokens: TokenService, admin_user: User) -> dict[str, str]:
    return bearer(tokens, admin_user)


@pytest.fixture(name="participant_headers")
def participant_headers_fixture(tokens: TokenService, participant: User) -> dict[str, str]:
    return bearer(tokens, participant)


@pytest.fixture(name="make_session")
def make_session_fixture(session: Session, admin_user: User, settings: Settings):
    """Factory for class sessions at a given date and time."""

    def make(day: str, time: str = "09:00", title: str = "Morning Flow", **kwargs) -> ClassSession:
        class_session = ClassSession(
            title=title,
            date=day,
            time=time,
            starts_at=to_iso(combine_local(day, time, settings.studio_timezone)),
            created_by_id=admin_user.id,
            **kwargs,
        )
        session.add(class_session)
        session.commit()
        session.refresh(class_session)
        return class_session

    return make


@pytest.fixture(name="upcoming_session")
def upcoming_session_fixture(make_session) -> ClassSession:
    """A session tomorrow at 09:00."""
    return make_session((NOW + timedelta(days=1)).date().isoformat(), "09:00")


@pytest.fixture(name="past_session")
def past_session_fixture(make_session) -> ClassSession:
    """A session that started yesterday."""
    return make_session((NOW - timedelta(days=1)).date().isoformat(), "18:30", "Evening Yin")
