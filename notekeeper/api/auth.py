"""Auth endpoints: signup, login, Google OAuth, current user, forgot-password."""

import json
import logging
from urllib.parse import quote, urlencode

import jwt
from fastapi import APIRouter, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from notekeeper.api.deps import CurrentUserDep, DbDep, SettingsDep
from notekeeper.core.config import Settings
from notekeeper.core.errors import AppError, ServiceUnavailableError, UnexpectedError
from notekeeper.core.security import create_access_token, create_oauth_state, verify_oauth_state
from notekeeper.models import User
from notekeeper.schemas.auth import (
    FORGOT_PASSWORD_MESSAGE,
    AuthResponse,
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    SignupRequest,
    UserPublic,
)
from notekeeper.services import identity
from notekeeper.services.google_oauth import GoogleOAuthClient, GoogleOAuthError

logger = logging.getLogger(__name__)
router = APIRouter()

OAUTH_FAILURE_ERROR = "auth_failed"


def _auth_response(user: User, settings: Settings) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(user.id, settings),
        user=UserPublic.model_validate(user),
    )


def _google_client(settings: Settings) -> GoogleOAuthClient:
    if not settings.google_configured:
        raise ServiceUnavailableError("Google sign-in is not configured.")
    return GoogleOAuthClient.from_settings(settings)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(body: SignupRequest, db: DbDep, settings: SettingsDep) -> AuthResponse:
    """Create an account and return a session token for it."""
    user = identity.signup(db, body.username, body.email, body.password, settings)
    return _auth_response(user, settings)


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, db: DbDep, settings: SettingsDep) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    credentials = identity.LocalCredentials(email=body.email, password=body.password)
    user = identity.resolve_identity(db, credentials, settings)
    return _auth_response(user, settings)


@router.get("/me", response_model=UserPublic)
def me(current_user: CurrentUserDep) -> CurrentUser:
    return current_user


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(body: ForgotPasswordRequest, db: DbDep, settings: SettingsDep) -> MessageResponse:
    """Issue a reset grant if the account exists. The answer is the same either way."""
    # TODO: deliver the token by email once a mail transport is configured.
    identity.request_password_reset(db, body.email, settings)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.get("/google")
def google_login(settings: SettingsDep) -> RedirectResponse:
    """Redirect to Google's consent screen (profile + email, account chooser forced)."""
    client = _google_client(settings)
    url = client.authorization_url(create_oauth_state(settings))
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


def _login_failure(settings: Settings) -> RedirectResponse:
    query = urlencode({"error": OAUTH_FAILURE_ERROR})
    return RedirectResponse(
        f"{settings.FRONTEND_URL}/login?{query}", status_code=status.HTTP_302_FOUND
    )


@router.get("/google/callback")
async def google_callback(
    db: DbDep,
    settings: SettingsDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """
    Finish the Google flow: exchange the code, link or create the local user,
    then send the browser to the frontend callback with the token and user in the query.

    Every failure ends on the frontend login page with an opaque error marker.
    """
    if error:
        logger.info("Google sign-in denied or failed at provider", extra={"provider_error": error[:100]})
        return _login_failure(settings)
    if not settings.google_configured:
        logger.error("Google callback hit but Google sign-in is not configured")
        return _login_failure(settings)
    if not code or not verify_oauth_state(state, settings):
        logger.info("Google callback rejected: missing code or bad state")
        return _login_failure(settings)

    client = GoogleOAuthClient.from_settings(settings)
    try:
        profile = await client.fetch_profile(code)
    except GoogleOAuthError as e:
        logger.error(
            "Google token exchange failed",
            extra={"reason": e.message[:200], "status_code": e.status_code},
        )
        return _login_failure(settings)

    try:
        user = await run_in_threadpool(identity.resolve_identity, db, profile, settings)
        auth = _auth_response(user, settings)
    except UnexpectedError as e:
        logger.error("Google sign-in failed while storing the user", exc_info=e.cause)
        return _login_failure(settings)
    except AppError as e:
        logger.warning(
            "Google sign-in could not resolve a local user",
            extra={"reason": e.message[:200], "code": e.code},
        )
        return _login_failure(settings)
    except (SQLAlchemyError, jwt.PyJWTError):
        logger.exception("Google sign-in failed while resolving the local user")
        return _login_failure(settings)

    user_json = json.dumps(auth.user.model_dump(), separators=(",", ":"))
    query = f"token={quote(auth.token, safe='')}&user={quote(user_json, safe='')}"
    target = f"{settings.FRONTEND_URL}/auth/callback?{query}"
    return RedirectResponse(target, status_code=status.HTTP_302_FOUND)
