"""FastAPI dependencies.

Every collaborator a route needs (settings, clock, database session, token
service, OAuth client, SMS sender) is provided here. Tests replace any of
them through ``app.dependency_overrides``.
"""
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from studio.attendance.ledger import AttendanceLedger
from studio.core.config import Settings, get_settings
from studio.core.database import get_session
from studio.core.errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from studio.core.security import TokenClaims, TokenService
from studio.core.timeutil import Clock
from studio.identity.google import GoogleOAuthClient
from studio.identity.otp import OtpStore
from studio.identity.resolver import IdentityResolver
from studio.identity.sms import SmsSender
from studio.models import Role, User
from studio.reports.service import ReportService

bearer_scheme = HTTPBearer(auto_error=False)

_clock = Clock()
_sms_sender = SmsSender()


def get_clock() -> Clock:
    return _clock


def get_sms_sender() -> SmsSender:
    return _sms_sender


SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[Session, Depends(get_session)]
ClockDep = Annotated[Clock, Depends(get_clock)]


def get_token_service(settings: SettingsDep) -> TokenService:
    return TokenService(settings)


def get_oauth_client(settings: SettingsDep) -> GoogleOAuthClient:
    return GoogleOAuthClient(settings)


TokensDep = Annotated[TokenService, Depends(get_token_service)]


def get_otp_store(session: SessionDep, settings: SettingsDep, clock: ClockDep) -> OtpStore:
    return OtpStore(session, settings, clock)


def get_identity_resolver(
    session: SessionDep, settings: SettingsDep, tokens: TokensDep, clock: ClockDep
) -> IdentityResolver:
    return IdentityResolver(session, settings, tokens, clock)


def get_ledger(session: SessionDep, clock: ClockDep) -> AttendanceLedger:
    return AttendanceLedger(session, clock)


def get_report_service(
    session: SessionDep, clock: ClockDep, settings: SettingsDep
) -> ReportService:
    return ReportService(session, clock, settings.studio_timezone)


def get_current_claims(
    tokens: TokensDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """Claims of the bearer token; 401 when absent, 403 when invalid."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")
    claims = tokens.verify_access(credentials.credentials)
    if claims is None:
        raise InvalidTokenError("Invalid or expired token")
    return claims


ClaimsDep = Annotated[TokenClaims, Depends(get_current_claims)]


def require_role(role: Role):
    """Build a dependency that admits only tokens carrying ``role``.

    Applied once per router via ``dependencies=[Depends(require_role(...))]``.
    """

    def check_role(claims: ClaimsDep) -> TokenClaims:
        if claims.role != role:
            raise ForbiddenError(f"{role.value.capitalize()} access required")
        return claims

    return check_role


def get_current_participant(claims: ClaimsDep, session: SessionDep) -> User:
    user = session.get(User, claims.user_id)
    if user is None or user.role != Role.participant:
        raise InvalidTokenError("Unknown participant")
    return user


LedgerDep = Annotated[AttendanceLedger, Depends(get_ledger)]
ParticipantDep = Annotated[User, Depends(get_current_participant)]
