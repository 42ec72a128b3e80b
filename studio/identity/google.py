"""Google OAuth client used for the admin login."""
import logging
from dataclasses import dataclass

from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

from studio.core.config import Settings

logger = logging.getLogger(__name__)

# Profile scopes only; the studio never touches the admin's Google data.
SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]


@dataclass(frozen=True)
class GoogleProfile:
    """The parts of a Google identity the studio cares about."""
    subject: str
    email: str
    name: str
    picture: str | None = None


class GoogleOAuthClient:
    """Builds authorization URLs and exchanges codes for a profile."""

    def __init__(self, settings: Settings):
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.redirect_uri = settings.google_redirect_uri

    def _flow(self) -> Flow:
        client_config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.redirect_uri],
            }
        }
        # The URL and the code exchange happen in different requests, so no
        # PKCE verifier can be carried between them.
        return Flow.from_client_config(
            client_config,
            scopes=SCOPES,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self) -> str:
        url, _state = self._flow().authorization_url(access_type="offline")
        return url

    def fetch_profile(self, code: str) -> GoogleProfile | None:
        """Exchange an authorization code for the user's profile.

        Returns None if the exchange or the profile lookup fails.
        """
        flow = self._flow()
        try:
            flow.fetch_token(code=code)
            service = build(
                "oauth2", "v2", credentials=flow.credentials, cache_discovery=False
            )
            info = service.userinfo().get().execute()
        except Exception as e:
            logger.error(f"Google OAuth exchange failed: {e}")
            return None

        if not info.get("id") or not info.get("email"):
            logger.warning("Google profile is missing id or email")
            return None

        return GoogleProfile(
            subject=info["id"],
            email=info["email"],
            name=info.get("name") or info["email"],
            picture=info.get("picture"),
        )
