from fastapi import APIRouter, Cookie, Depends, Response, status

from app.core.config import get_settings
from app.core.tokens import TokenPair
from app.models.user import User
from app.routers.deps import ACCESS_COOKIE, REFRESH_COOKIE, get_auth_service, get_current_user
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshResponse,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
    UserRead,
)
from app.schemas.base import MessageResponse
from app.services.auth import AuthService

router = APIRouter(tags=["auth"])


def set_session_cookies(response: Response, pair: TokenPair) -> None:
    settings = get_settings()
    response.set_cookie(
        ACCESS_COOKIE,
        pair.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        pair.refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def clear_session_cookies(response: Response) -> None:
    settings = get_settings()
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, httponly=True, secure=settings.cookie_secure, samesite=settings.cookie_samesite)


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, service: AuthService = Depends(get_auth_service)) -> SignupResponse:
    user = service.signup(
        name=payload.name,
        phone=payload.phone,
        email=payload.email,
        password=payload.password,
        confirm_password=payload.confirm_password,
    )
    return SignupResponse(message="User created successfully", user=UserRead.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    user, pair = service.login(email=payload.email, phone=payload.phone, password=payload.password)
    set_session_cookies(response, pair)
    return LoginResponse(
        message="Login successful",
        user=UserRead.model_validate(user),
        access_token=pair.access_token,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    clear_session_cookies(response)
    return MessageResponse(message="Logout successful")


@router.post("/refresh-token", response_model=RefreshResponse)
def refresh_session(
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    service: AuthService = Depends(get_auth_service),
) -> RefreshResponse:
    _, pair = service.refresh(refresh_token)
    set_session_cookies(response, pair)
    return RefreshResponse(message="Token refreshed", access_token=pair.access_token)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    service.reset_password(current_user, payload.current_password, payload.new_password)
    return MessageResponse(message="Password reset successful")
