from datetime import datetime

from pydantic import EmailStr

from app.schemas.base import CamelModel


# Fields are optional here so that missing values reach the auth workflow and
# are reported with its messages instead of a generic schema error.
class SignupRequest(CamelModel):
    name: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    confirm_password: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    phone: str | None = None
    password: str | None = None


class ResetPasswordRequest(CamelModel):
    current_password: str | None = None
    new_password: str | None = None


class UserRead(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    created_at: datetime


class SignupResponse(CamelModel):
    message: str
    user: UserRead
    redirect_url: str = "/login"


class LoginResponse(CamelModel):
    message: str
    user: UserRead
    access_token: str
    redirect_url: str = "/dashboard"


class RefreshResponse(CamelModel):
    message: str
    access_token: str
