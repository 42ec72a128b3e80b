"""Tests for login, token refresh and logout."""

import pytest
from sqlmodel import Session, select

from studio.core.errors import (
    ForbiddenError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from studio.identity.google import GoogleProfile
from studio.identity.otp import OtpStore
from studio.identity.resolver import IdentityResolver
from studio.models import RefreshToken, Role, User

ADMIN_EMAIL = "owner@studio.test"


@pytest.fixture(name="resolver")
def resolver_fixture(session, settings, tokens, clock) -> IdentityResolver:
    return IdentityResolver(session, settings, tokens, clock)


@pytest.fixture(name="otp_store")
def otp_store_fixture(session, settings, clock) -> OtpStore:
    return OtpStore(session, settings, clock)


def profile(email: str = ADMIN_EMAIL, subject: str = "google-sub-1", name: str = "Owner"):
    return GoogleProfile(subject=subject, email=email, name=name)


class TestGoogleLogin:
    def test_failed_exchange(self, resolver: IdentityResolver):
        with pytest.raises(ValidationError):
            resolver.login_with_google(None)

    def test_other_email_is_rejected(self, resolver: IdentityResolver, session: Session):
        with pytest.raises(ForbiddenError):
            resolver.login_with_google(profile(email="someone@else.test"))
        assert session.exec(select(User)).all() == []

    def test_rejected_when_no_admin_configured(self, session, settings, tokens, clock):
        resolver = IdentityResolver(
            session, settings.model_copy(update={"admin_email": ""}), tokens, clock
        )
        with pytest.raises(ForbiddenError):
            resolver.login_with_google(profile())

    def test_first_login_creates_admin(self, resolver: IdentityResolver, tokens):
        result = resolver.login_with_google(profile(email="Owner@Studio.test"))

        assert result.user.role == Role.admin
        assert result.user.google_id == "google-sub-1"
        claims = tokens.verify_access(result.access_token)
        assert claims.user_id == result.user.id
        assert claims.role == Role.admin

    def test_repeat_login_reuses_admin(self, resolver: IdentityResolver, session: Session):
        first = resolver.login_with_google(profile(name="Owner"))
        second = resolver.login_with_google(profile(name="Studio Owner"))

        assert second.user.id == first.user.id
        assert second.user.name == "Studio Owner"
        assert len(session.exec(select(User)).all()) == 1
        assert len(session.exec(select(RefreshToken)).all()) == 2


class TestOtpLogin:
    def test_logs_participant_in(self, resolver, otp_store, participant, tokens):
        _, code = otp_store.request_code("0501234567")
        result = resolver.login_with_otp(otp_store, "050-1234567", code)

        assert result.user.id == participant.id
        claims = tokens.verify_access(result.access_token)
        assert claims.role == Role.participant
        assert claims.phone_number == "+972501234567"

    def test_code_is_single_use(self, resolver, otp_store, participant):
        _, code = otp_store.request_code("0501234567")
        resolver.login_with_otp(otp_store, "0501234567", code)
        with pytest.raises(NotFoundError):
            resolver.login_with_otp(otp_store, "0501234567", code)


class TestRefresh:
    def test_issues_new_access_token(self, resolver, admin_user, tokens):
        result = resolver.login_with_google(profile())
        access = resolver.refresh(result.refresh_token)

        claims = tokens.verify_access(access)
        assert claims.user_id == admin_user.id

    def test_missing_token(self, resolver):
        with pytest.raises(UnauthorizedError) as exc:
            resolver.refresh(None)
        assert exc.value.status_code == 401

    def test_access_token_is_not_a_refresh_token(self, resolver, admin_user):
        result = resolver.login_with_google(profile())
        with pytest.raises(InvalidTokenError) as exc:
            resolver.refresh(result.access_token)
        assert exc.value.status_code == 403

    def test_logged_out_token(self, resolver, admin_user):
        result = resolver.login_with_google(profile())
        resolver.logout(result.refresh_token)
        with pytest.raises(InvalidTokenError):
            resolver.refresh(result.refresh_token)

    def test_expired_row(self, resolver, admin_user, clock):
        result = resolver.login_with_google(profile())
        clock.advance(days=31)
        with pytest.raises(InvalidTokenError):
            resolver.refresh(result.refresh_token)


class TestLogout:
    def test_removes_only_that_token(self, resolver, admin_user, session):
        first = resolver.login_with_google(profile())
        second = resolver.login_with_google(profile())

        resolver.logout(first.refresh_token)

        remaining = [r.token for r in session.exec(select(RefreshToken)).all()]
        assert remaining == [second.refresh_token]

    def test_unknown_or_missing_token_is_fine(self, resolver):
        resolver.logout("not-a-token")
        resolver.logout(None)
