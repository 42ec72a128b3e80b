"""Tests for database models."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from studio.models import OtpCode, RefreshToken, Response, ResponseStatus, Role, User


class TestUserModel:
    """Tests for the User model."""

    def test_defaults(self, session: Session):
        """Test that ids and timestamps are filled in."""
        user = User(name="Noa", phone_number="+972523334444", role=Role.participant)
        session.add(user)
        session.commit()

        retrieved = session.exec(select(User).where(User.name == "Noa")).one()
        assert len(retrieved.id) == 36
        assert retrieved.created_at.endswith("+00:00")
        assert retrieved.email is None

    def test_unique_phone_number(self, session: Session, participant: User):
        """Test that two users cannot share a phone number."""
        session.add(User(name="Copy", phone_number=participant.phone_number, role=Role.participant))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_unique_google_id(self, session: Session, admin_user: User):
        session.add(User(name="Copy", google_id=admin_user.google_id, role=Role.admin))
        with pytest.raises(IntegrityError):
            session.commit()


class TestResponseModel:
    """Tests for the Response model."""

    def test_one_row_per_pair(self, session: Session, upcoming_session, participant):
        """Test that a participant has at most one response per session."""
        for status in (ResponseStatus.joining, ResponseStatus.maybe):
            session.add(
                Response(
                    session_id=upcoming_session.id,
                    participant_id=participant.id,
                    status=status,
                )
            )
        with pytest.raises(IntegrityError):
            session.commit()

    def test_admin_override_defaults_off(self, session: Session, upcoming_session, participant):
        response = Response(
            session_id=upcoming_session.id,
            participant_id=participant.id,
            status=ResponseStatus.not_joining,
        )
        session.add(response)
        session.commit()
        session.refresh(response)

        assert response.admin_override is False
        assert response.status == ResponseStatus.not_joining


class TestTokenModels:
    def test_one_otp_row_per_phone(self, session: Session):
        session.add(OtpCode(phone_number="+972501234567", code="111111", expires_at="x"))
        session.commit()
        session.add(OtpCode(phone_number="+972501234567", code="222222", expires_at="x"))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_unique_refresh_token(self, session: Session, admin_user: User):
        session.add(RefreshToken(user_id=admin_user.id, token="abc", expires_at="x"))
        session.commit()
        session.add(RefreshToken(user_id=admin_user.id, token="abc", expires_at="x"))
        with pytest.raises(IntegrityError):
            session.commit()
