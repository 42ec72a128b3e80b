"""One-time code issuance and verification for participant login.

Only pre-provisioned participants can request a code; OTP login never
creates identities. Each phone number has at most one row in ``otp_codes``:
requesting a new code deletes the previous ones, so an older code stops
verifying as soon as a new one is issued.
"""
import logging
import secrets
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from studio.core.config import Settings
from studio.core.errors import NotFoundError, ValidationError
from studio.core.timeutil import Clock, to_iso
from studio.identity import phone
from studio.models import OtpCode, Role, User

logger = logging.getLogger(__name__)

CODE_LENGTH = 6
INVALID_CODE_MESSAGE = "Invalid or expired OTP"


def generate_code() -> str:
    """Return a uniformly random six-digit numeric code."""
    return f"{secrets.randbelow(10**CODE_LENGTH):0{CODE_LENGTH}d}"


def canonical_phone(raw: str) -> str:
    """Validate and normalize, raising the 400 taxonomy error on failure."""
    if not phone.validate(raw):
        raise ValidationError("Invalid phone number format")
    return phone.normalize(raw)


def find_participant_by_phone(session: Session, phone_number: str) -> User | None:
    statement = (
        select(User)
        .where(User.phone_number == phone_number)
        .where(User.role == Role.participant)
    )
    return session.exec(statement).first()


class OtpStore:
    """Issues and consumes one-time codes for a phone number."""

    def __init__(self, session: Session, settings: Settings, clock: Clock):
        self.session = session
        self.clock = clock
        self.lifetime = timedelta(minutes=settings.otp_expire_minutes)

    def request_code(self, raw_phone: str) -> tuple[str, str]:
        """Issue a fresh code for a known participant.

        Returns:
            ``(canonical_phone, code)``. The caller is responsible for
            dispatching the code.

        Raises:
            ValidationError: the phone number is malformed.
            NotFoundError: no participant has this phone number.
        """
        phone_number = canonical_phone(raw_phone)
        if find_participant_by_phone(self.session, phone_number) is None:
            raise NotFoundError("Participant not found")

        code = generate_code()
        expires_at = to_iso(self.clock.now() + self.lifetime)

        for stale in self.session.exec(
            select(OtpCode).where(OtpCode.phone_number == phone_number)
        ).all():
            self.session.delete(stale)
        self.session.flush()
        self.session.add(
            OtpCode(phone_number=phone_number, code=code, expires_at=expires_at)
        )
        try:
            self.session.commit()
        except IntegrityError:
            # A concurrent request inserted first; take over its row.
            self.session.rollback()
            logger.info(f"OTP row for {phone_number} already present, replacing code")
            existing = self.session.exec(
                select(OtpCode).where(OtpCode.phone_number == phone_number)
            ).one()
            existing.code = code
            existing.expires_at = expires_at
            existing.used = False
            existing.created_at = to_iso(self.clock.now())
            self.session.add(existing)
            self.session.commit()

        logger.info(f"Issued OTP for {phone_number}")
        return phone_number, code

    def consume(self, raw_phone: str, code: str) -> str:
        """Mark a matching, unused, unexpired code as used.

        Every failure (malformed or unknown phone, wrong code, expired code,
        already used code) raises the same error so callers cannot probe
        which one occurred.

        Returns:
            The canonical phone number the code was issued to.
        """
        if not phone.validate(raw_phone):
            raise NotFoundError(INVALID_CODE_MESSAGE)
        phone_number = phone.normalize(raw_phone)

        statement = (
            select(OtpCode)
            .where(OtpCode.phone_number == phone_number)
            .where(OtpCode.code == code)
            .where(OtpCode.used == False)  # noqa: E712
            .where(OtpCode.expires_at > to_iso(self.clock.now()))
        )
        record = self.session.exec(statement).first()
        if record is None:
            logger.info(f"OTP verification failed for {phone_number}")
            raise NotFoundError(INVALID_CODE_MESSAGE)

        record.used = True
        self.session.add(record)
        self.session.commit()
        return phone_number
