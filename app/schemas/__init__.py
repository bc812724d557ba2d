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
from app.schemas.upload import RearrangeRequest, UploadListResponse, UploadRead, UploadResponse

__all__ = [
    "SignupRequest",
    "SignupResponse",
    "LoginRequest",
    "LoginResponse",
    "RefreshResponse",
    "ResetPasswordRequest",
    "UserRead",
    "MessageResponse",
    "UploadRead",
    "UploadListResponse",
    "UploadResponse",
    "RearrangeRequest",
]
