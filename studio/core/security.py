"""Access and refresh token issuance and verification.

Both token kinds are HS256 JWTs, but they are signed with independent
secrets so that a leaked access secret cannot mint refresh tokens and vice
versa. Verification never raises: callers branch on ``None``.

There is no revocation at this layer. A refresh token is only honored for
renewal while its row still exists in the ``refresh_tokens`` table (see
:mod:`studio.identity.resolver`).
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from jose import JWTError, jwt

from studio.core.config import Settings
from studio.models.user import Role

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside a token.

    Exactly one of ``email`` (admin) or ``phone_number`` (participant) is
    normally set.
    """
    user_id: str
    role: Role
    email: str | None = None
    phone_number: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"userId": self.user_id, "role": self.role.value}
        if self.email:
            payload["email"] = self.email
        if self.phone_number:
            payload["phoneNumber"] = self.phone_number
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TokenClaims":
        return cls(
            user_id=payload["userId"],
            role=Role(payload["role"]),
            email=payload.get("email"),
            phone_number=payload.get("phoneNumber"),
        )


class TokenService:
    """Issues and verifies signed tokens using the configured secrets."""

    def __init__(self, settings: Settings):
        self.algorithm = settings.jwt_algorithm
        self._secrets = {
            ACCESS: settings.jwt_secret,
            REFRESH: settings.jwt_refresh_secret,
        }
        self._lifetimes = {
            ACCESS: timedelta(minutes=settings.access_token_expire_minutes),
            REFRESH: timedelta(days=settings.refresh_token_expire_days),
        }

    @property
    def refresh_lifetime(self) -> timedelta:
        return self._lifetimes[REFRESH]

    def _issue(self, claims: TokenClaims, token_type: str) -> str:
        now = datetime.now(UTC)
        payload = claims.to_payload()
        payload.update(
            {
                "type": token_type,
                "iat": now,
                "exp": now + self._lifetimes[token_type],
                "jti": uuid4().hex,  # two logins in the same second still differ
            }
        )
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def _verify(self, token: str, token_type: str) -> TokenClaims | None:
        try:
            payload = jwt.decode(
                token, self._secrets[token_type], algorithms=[self.algorithm]
            )
        except JWTError as e:
            logger.debug(f"Rejected {token_type} token: {e}")
            return None
        if payload.get("type") != token_type:
            return None
        try:
            return TokenClaims.from_payload(payload)
        except (KeyError, ValueError):
            return None

    def issue_access(self, claims: TokenClaims) -> str:
        return self._issue(claims, ACCESS)

    def issue_refresh(self, claims: TokenClaims) -> str:
        return self._issue(claims, REFRESH)

    def verify_access(self, token: str) -> TokenClaims | None:
        return self._verify(token, ACCESS)

    def verify_refresh(self, token: str) -> TokenClaims | None:
        return self._verify(token, REFRESH)
