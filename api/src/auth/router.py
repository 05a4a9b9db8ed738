"""Authentication API endpoints.

Provides routes for:
- User registration and login
- Current user profile
"""

from fastapi import APIRouter, status

from src.auth.dependencies import AuthServiceDep, CurrentUser, handle_auth_error
from src.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from src.auth.service import InvalidCredentialsError, UserExistsError, UserNotFoundError


router = APIRouter(prefix="/v1/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    responses={
        409: {"description": "Email already exists"},
        422: {"description": "Validation error"},
    },
)
async def register(
    data: RegisterRequest,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Register a new user account."""
    try:
        user = auth_service.register_user(data)
    except UserExistsError as e:
        raise handle_auth_error(e) from e
    return auth_service.to_response(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User login",
    responses={401: {"description": "Invalid credentials"}},
)
async def login(
    data: LoginRequest,
    auth_service: AuthServiceDep,
) -> TokenResponse:
    """Authenticate user and return an access token."""
    try:
        user = auth_service.authenticate_user(data.email, data.password)
    except InvalidCredentialsError as e:
        raise handle_auth_error(e) from e

    access_token, expires_in = auth_service.create_access_token(user)
    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=auth_service.to_response(user),
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
async def get_me(
    current_user: CurrentUser,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Return the authenticated user's profile."""
    user = auth_service.get_user_by_id(current_user.id)
    if not user:
        raise handle_auth_error(UserNotFoundError())
    return auth_service.to_response(user)
