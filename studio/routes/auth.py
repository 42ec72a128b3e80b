"""Login, token refresh and logout routes."""
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends

from studio.core.deps import (
    SettingsDep,
    get_identity_resolver,
    get_oauth_client,
    get_otp_store,
    get_sms_sender,
)
from studio.identity.google import GoogleOAuthClient
from studio.identity.otp import OtpStore
from studio.identity.resolver import IdentityResolver, LoginResult
from studio.identity.sms import SmsSender
from studio.schemas.auth import (
    AccessTokenResult,
    GoogleAuthUrl,
    GoogleCallback,
    LoginResponse,
    MessageResult,
    OtpRequest,
    OtpRequestResult,
    OtpVerify,
    RefreshRequest,
    UserOut,
)

router = APIRouter(prefix="/auth", tags=["auth"])

ResolverDep = Annotated[IdentityResolver, Depends(get_identity_resolver)]
OtpStoreDep = Annotated[OtpStore, Depends(get_otp_store)]


def login_response(result: LoginResult) -> LoginResponse:
    user = result.user
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        user=UserOut(
            id=user.id,
            name=user.name,
            role=user.role,
            email=user.email,
            phone_number=user.phone_number,
        ),
    )


@router.get("/google/url", response_model=GoogleAuthUrl)
async def google_auth_url(
    oauth: Annotated[GoogleOAuthClient, Depends(get_oauth_client)],
):
    """Return the Google consent URL the admin is sent to."""
    return GoogleAuthUrl(auth_url=oauth.authorization_url())


@router.post("/google/callback", response_model=LoginResponse)
async def google_callback(
    body: GoogleCallback,
    resolver: ResolverDep,
    oauth: Annotated[GoogleOAuthClient, Depends(get_oauth_client)],
):
    """
    Complete the admin login.

    Exchanges the authorization code for a Google profile. Only the
    configured admin email is accepted; the admin account is created on
    first login.
    """
    profile = oauth.fetch_profile(body.code)
    return login_response(resolver.login_with_google(profile))


@router.post("/otp/request", response_model=OtpRequestResult, response_model_exclude_none=True)
async def request_otp(
    body: OtpRequest,
    background_tasks: BackgroundTasks,
    otp_store: OtpStoreDep,
    settings: SettingsDep,
    sms: Annotated[SmsSender, Depends(get_sms_sender)],
):
    """
    Send a one-time login code to a participant's phone.

    The SMS is sent after the response; delivery problems are logged only.
    Outside production the code is echoed back as ``debugOtp``.
    """
    phone_number, code = otp_store.request_code(body.phone_number)
    background_tasks.add_task(
        sms.send, phone_number, f"Your {settings.app_name} verification code is: {code}"
    )
    return OtpRequestResult(
        message="OTP sent successfully",
        debug_otp=None if settings.is_production else code,
    )


@router.post("/otp/verify", response_model=LoginResponse)
async def verify_otp(body: OtpVerify, resolver: ResolverDep, otp_store: OtpStoreDep):
    """Exchange a phone number and one-time code for tokens."""
    return login_response(resolver.login_with_otp(otp_store, body.phone_number, body.code))


@router.post("/refresh", response_model=AccessTokenResult)
async def refresh(body: RefreshRequest, resolver: ResolverDep):
    """Issue a new access token for a live refresh token."""
    return AccessTokenResult(access_token=resolver.refresh(body.refresh_token))


@router.post("/logout", response_model=MessageResult)
async def logout(body: RefreshRequest, resolver: ResolverDep):
    """Revoke a refresh token. Succeeds even if the token is unknown."""
    resolver.logout(body.refresh_token)
    return MessageResult(message="Logged out successfully")
