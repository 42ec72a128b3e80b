"""Map login proofs to users and issue tokens.

Two login paths end in the same token scheme:

- **Admin / Google**: the profile email must equal the configured admin
  email. The user is looked up by Google subject id and created on first
  login.
- **Participant / OTP**: the phone number must belong to an existing
  participant. Participants are never created here.

Every successful login persists a refresh-token row. Refreshing requires
both a valid signature and a live row; logging out deletes the row.
"""
import logging
from dataclasses import dataclass

from sqlmodel import Session, select

from studio.core.config import Settings
from studio.core.errors import (
    ForbiddenError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from studio.core.security import TokenClaims, TokenService
from studio.core.timeutil import Clock, to_iso
from studio.identity.google import GoogleProfile
from studio.identity.otp import OtpStore, find_participant_by_phone
from studio.models import RefreshToken, Role, User

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    access_token: str
    refresh_token: str
    user: User


def claims_for(user: User) -> TokenClaims:
    if user.role == Role.admin:
        return TokenClaims(user_id=user.id, role=user.role, email=user.email)
    return TokenClaims(user_id=user.id, role=user.role, phone_number=user.phone_number)


class IdentityResolver:
    def __init__(
        self,
        session: Session,
        settings: Settings,
        tokens: TokenService,
        clock: Clock,
    ):
        self.session = session
        self.settings = settings
        self.tokens = tokens
        self.clock = clock

    def _issue(self, user: User) -> LoginResult:
        claims = claims_for(user)
        access_token = self.tokens.issue_access(claims)
        refresh_token = self.tokens.issue_refresh(claims)

        self.session.add(
            RefreshToken(
                user_id=user.id,
                token=refresh_token,
                expires_at=to_iso(self.clock.now() + self.tokens.refresh_lifetime),
            )
        )
        self.session.commit()
        self.session.refresh(user)
        return LoginResult(access_token, refresh_token, user)

    def login_with_otp(self, otp_store: OtpStore, raw_phone: str, code: str) -> LoginResult:
        """Consume a one-time code and log the participant in."""
        phone_number = otp_store.consume(raw_phone, code)

        participant = find_participant_by_phone(self.session, phone_number)
        if participant is None:
            raise NotFoundError("Participant not found")

        logger.info(f"Participant {participant.id} logged in with OTP")
        return self._issue(participant)

    def login_with_google(self, profile: GoogleProfile | None) -> LoginResult:
        """Resolve (or create) the admin for a verified Google profile."""
        if profile is None:
            raise ValidationError("Failed to get user information from Google")

        allowed = self.settings.admin_email.strip().lower()
        if not allowed or profile.email.strip().lower() != allowed:
            logger.warning(f"Rejected Google login for {profile.email}")
            raise ForbiddenError(
                "Unauthorized. Only the studio admin can log in with Google."
            )

        user = self.session.exec(
            select(User).where(User.google_id == profile.subject)
        ).first()
        now = to_iso(self.clock.now())
        if user is None:
            user = User(
                name=profile.name,
                email=profile.email,
                google_id=profile.subject,
                role=Role.admin,
                created_at=now,
                updated_at=now,
            )
            logger.info(f"Created admin user for Google subject {profile.subject}")
        else:
            user.name = profile.name
            user.email = profile.email
            user.updated_at = now
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)

        return self._issue(user)

    def refresh(self, refresh_token: str | None) -> str:
        """Return a new access token for a live refresh token."""
        if not refresh_token:
            raise UnauthorizedError("Refresh token required")

        claims = self.tokens.verify_refresh(refresh_token)
        if claims is None:
            raise InvalidTokenError("Invalid refresh token")

        record = self.session.exec(
            select(RefreshToken)
            .where(RefreshToken.token == refresh_token)
            .where(RefreshToken.expires_at > to_iso(self.clock.now()))
        ).first()
        if record is None:
            raise InvalidTokenError("Refresh token not found or expired")

        return self.tokens.issue_access(claims)

    def logout(self, refresh_token: str | None) -> None:
        """Forget a refresh token. Unknown or absent tokens are ignored."""
        if not refresh_token:
            return
        for record in self.session.exec(
            select(RefreshToken).where(RefreshToken.token == refresh_token)
        ).all():
            self.session.delete(record)
        self.session.commit()
