"""
API v1 routes.

Defines the REST endpoints of the users API:

- GET    /users               - Count users
- POST   /users               - Register
- PATCH  /users (or PUT)      - Update own profile (bearer token)
- POST   /users/exist         - Social login redirect lookup
- POST   /users/social        - Social login
- POST   /users/profile/verify - ID.me identity verification (bearer token)
- GET    /users/by_location   - Count users by state/zip
"""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from src.api.dependencies import get_current_user, get_user_service
from src.api.errors import field_errors
from src.api.models import (
    EmailLookupRequest,
    ErrorResponse,
    ErrorsResponse,
    RedirectPathResponse,
    SocialLoginRequest,
    SocialLoginResponse,
    TokenResponse,
    UserCountResponse,
    UserParams,
    UserRequest,
    UserResponse,
    VerifyFailedResponse,
    VerifyRequest,
    VerifyResponse,
)
from src.config.settings import Settings, get_settings
from src.domain.accounts import UserAccountService
from src.domain.exceptions import UserInvalid
from src.domain.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["v1"])

FIELD_ERRORS = {422: {"description": "Field errors, e.g. {\"email\": [\"has already been taken\"]}"}}
SIGN_IN_REQUIRED = {401: {"model": ErrorResponse, "description": "Missing or unknown token"}}


def _registration_redirect(settings: Settings, error: UserInvalid) -> RedirectResponse:
    alert = urlencode({"alert": "\n".join(error.full_messages())})
    return RedirectResponse(url=f"{settings.registration_url}?{alert}", status_code=302)


@router.get(
    "",
    response_model=UserCountResponse,
    responses={422: {"model": ErrorsResponse}},
    summary="Count users",
)
async def count_users(
    service: UserAccountService = Depends(get_user_service),
) -> UserCountResponse | JSONResponse:
    """Return the total number of registered users."""
    try:
        return UserCountResponse(user_count=service.count())
    except Exception as e:
        logger.exception("Counting users failed")
        return JSONResponse(status_code=422, content={"errors": str(e)})


@router.post(
    "",
    response_model=TokenResponse,
    responses=FIELD_ERRORS,
    summary="Register a new user",
    description="Create an account from the permitted user fields. "
    "A welcome email is sent in the background.",
)
async def register(
    request_data: UserRequest,
    background_tasks: BackgroundTasks,
    service: UserAccountService = Depends(get_user_service),
) -> TokenResponse | JSONResponse:
    """
    Register a new user and sign them in.

    Returns the session token the frontend stores to stay logged in.
    """
    try:
        user = service.register(request_data.user.model_dump(exclude_unset=True))
    except UserInvalid as e:
        return JSONResponse(status_code=422, content=e.errors)

    background_tasks.add_task(service.send_welcome, user)
    service.sign_in(user)
    return TokenResponse(token=user.token)


@router.patch(
    "",
    response_model=UserResponse,
    responses={**FIELD_ERRORS, **SIGN_IN_REQUIRED},
    summary="Update the current user's profile",
)
@router.put("", response_model=UserResponse, include_in_schema=False)
async def update_profile(
    request_data: UserRequest,
    current_user: User = Depends(get_current_user),
    service: UserAccountService = Depends(get_user_service),
) -> UserResponse | JSONResponse:
    """Apply the submitted fields to the signed-in user."""
    try:
        user = service.update_profile(current_user, request_data.user.model_dump(exclude_unset=True))
    except UserInvalid as e:
        return JSONResponse(status_code=422, content=e.errors)
    return UserResponse.model_validate(user)


@router.post(
    "/exist",
    response_model=RedirectPathResponse,
    summary="Resolve the social login redirect",
    description="Returns /profile when the email belongs to a registered user, "
    "/social_login otherwise.",
)
async def resolve_social_redirect(
    request_data: EmailLookupRequest | None = None,
    service: UserAccountService = Depends(get_user_service),
) -> RedirectPathResponse:
    email = request_data.user.email if request_data and request_data.user else None
    return RedirectPathResponse(redirect_to=service.social_redirect_path(email))


@router.post(
    "/social",
    response_model=SocialLoginResponse,
    responses={302: {"description": "Redirect to registration with an alert"}},
    summary="Log in with a social provider",
)
async def social_login(
    request_data: SocialLoginRequest | None = None,
    service: UserAccountService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
) -> SocialLoginResponse | RedirectResponse:
    """
    Create the user if needed, then sign them in.

    redirect_to is /profile for returning users and /signup-info for
    first-time social logins.
    """
    payload = request_data.user if request_data else {}
    try:
        params = UserParams.model_validate(payload)
        user, redirect_path = service.social_login(params.model_dump(exclude_unset=True))
    except ValidationError as e:
        return _registration_redirect(settings, UserInvalid(field_errors(e)))
    except UserInvalid as e:
        return _registration_redirect(settings, e)

    service.sign_in(user, event="authenticate_user")
    return SocialLoginResponse(
        token=user.token,
        user=UserResponse.model_validate(user),
        redirect_to=redirect_path,
    )


@router.post(
    "/profile/verify",
    response_model=VerifyResponse,
    responses={422: {"model": VerifyFailedResponse}, **SIGN_IN_REQUIRED},
    summary="Verify identity through ID.me",
)
def verify_identity(
    request: Request,
    request_data: VerifyRequest | None = None,
    current_user: User = Depends(get_current_user),
    service: UserAccountService = Depends(get_user_service),
) -> VerifyResponse | JSONResponse:
    """
    Store the ID.me verification result for the signed-in user.

    The access token may come in the JSON body or the query string. Runs in
    the threadpool since the ID.me call blocks.
    """
    access_token = request_data.access_token if request_data else None
    if access_token is None:
        access_token = request.query_params.get("access_token")
    try:
        verified = service.verify_identity(current_user, access_token)
    except Exception as e:
        logger.debug(
            "When verifying User id %s through ID.me, experienced this error: %s",
            current_user.id,
            e,
        )
        return JSONResponse(status_code=422, content={"status": "unprocessable_entity"})
    return VerifyResponse(status="ok", verified=verified)


@router.get(
    "/by_location",
    response_model=UserCountResponse,
    responses={422: {"model": ErrorsResponse}},
    summary="Count users by state or zip",
    description="Query with ?state=TX,CA and/or ?zip=78701,78702.",
)
async def count_by_location(
    request: Request,
    service: UserAccountService = Depends(get_user_service),
) -> UserCountResponse | JSONResponse:
    try:
        return UserCountResponse(user_count=service.count_by_location(dict(request.query_params)))
    except Exception as e:
        logger.exception("Counting users by location failed")
        return JSONResponse(status_code=422, content={"errors": str(e)})
