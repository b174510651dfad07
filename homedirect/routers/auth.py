"""
Authentication API endpoints for sessions, registration and email verification.
The session is a signed token stored in an HTTP-only cookie.
"""

from fastapi import APIRouter, Depends, Response, status
from homedirect.config import settings
from homedirect.models.user import User
from homedirect.services.auth import AuthService
from homedirect.services.error_handler import ERROR_RESPONSES
from homedirect.schemas.auth import LoginRequest, VerifyEmailRequest, EmailRequest
from homedirect.schemas.base import MessageResponse
from homedirect.schemas.user import UserCreate, UserResponse
from homedirect.utils.auth import session_max_age
from homedirect.utils.dependencies import get_auth_service, get_current_user


router = APIRouter(tags=["Authentication"])


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session token to a response."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(session_max_age().total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/"
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/"
    )


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Get current user",
    description="Return the user of the current session, or 401 when not logged in",
    responses={401: ERROR_RESPONSES[401]}
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())


@router.post(
    "/login",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with username and password and start a session",
    responses={401: ERROR_RESPONSES[401], 422: ERROR_RESPONSES[422]}
)
async def login(
    login_data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    """
    Authenticate user and set the session cookie.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user = await auth_service.authenticate_user(login_data.username, login_data.password)
    set_session_cookie(response, auth_service.create_session(user))
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/admin/login",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Administrator login",
    description="Authenticate an administrator and start a session",
    responses={401: ERROR_RESPONSES[401], 422: ERROR_RESPONSES[422]}
)
async def admin_login(
    login_data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    """
    Raises:
        InvalidCredentialsError: If credentials are invalid or the account is not an admin
    """
    user = await auth_service.authenticate_admin(login_data.username, login_data.password)
    set_session_cookie(response, auth_service.create_session(user))
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an unverified account, mail a verification code and start a session",
    responses={409: ERROR_RESPONSES[409], 422: ERROR_RESPONSES[422]}
)
async def register(
    user_data: UserCreate,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    """
    Register a new user.

    Raises:
        DuplicateResourceError: If the username or email is taken
    """
    user = await auth_service.register(user_data)
    set_session_cookie(response, auth_service.create_session(user))
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/verify-email",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify email",
    description="Consume the verification code mailed to an address",
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404]}
)
async def verify_email(
    verify_data: VerifyEmailRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    """
    Raises:
        NotFoundError: If no account uses the email
        AlreadyVerifiedError: If the email is already verified
        VerificationError: If the code is wrong or expired
    """
    user = await auth_service.verify_email(verify_data.email, verify_data.code)
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/request-verification",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Request a verification code",
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404]}
)
async def request_verification(
    email_data: EmailRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.request_verification(email_data.email)
    return MessageResponse(message="Verification email sent")


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Resend the verification code",
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404]}
)
async def resend_verification(
    email_data: EmailRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.resend_verification(email_data.email)
    return MessageResponse(message="Verification email sent")


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout",
    description="End the current session. Succeeds without a session too."
)
async def logout(response: Response) -> MessageResponse:
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")
