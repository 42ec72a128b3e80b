"""Tests for access and refresh token handling."""

from studio.core.config import Settings
from studio.core.security import TokenClaims, TokenService
from studio.models import Role

ADMIN = TokenClaims(user_id="u-1", role=Role.admin, email="owner@studio.test")
PARTICIPANT = TokenClaims(user_id="u-2", role=Role.participant, phone_number="+972501234567")


class TestTokenService:
    def test_access_round_trip_keeps_claims(self, tokens: TokenService):
        claims = tokens.verify_access(tokens.issue_access(PARTICIPANT))
        assert claims == PARTICIPANT

    def test_refresh_round_trip_keeps_claims(self, tokens: TokenService):
        assert tokens.verify_refresh(tokens.issue_refresh(ADMIN)) == ADMIN

    def test_tokens_are_not_interchangeable(self, tokens: TokenService):
        assert tokens.verify_refresh(tokens.issue_access(ADMIN)) is None
        assert tokens.verify_access(tokens.issue_refresh(ADMIN)) is None

    def test_same_secret_still_checks_type(self, settings: Settings):
        shared = TokenService(
            settings.model_copy(update={"jwt_refresh_secret": settings.jwt_secret})
        )
        assert shared.verify_access(shared.issue_refresh(ADMIN)) is None

    def test_each_issue_is_unique(self, tokens: TokenService):
        assert tokens.issue_refresh(ADMIN) != tokens.issue_refresh(ADMIN)

    def test_foreign_secret_rejected(self, tokens: TokenService, settings: Settings):
        other = TokenService(settings.model_copy(update={"jwt_secret": "someone-else"}))
        assert tokens.verify_access(other.issue_access(ADMIN)) is None

    def test_expired_token_rejected(self, settings: Settings):
        expired = TokenService(settings.model_copy(update={"access_token_expire_minutes": -5}))
        assert expired.verify_access(expired.issue_access(ADMIN)) is None

    def test_garbage_rejected(self, tokens: TokenService):
        assert tokens.verify_access("not-a-jwt") is None
        assert tokens.verify_refresh("") is None
