"""Access/refresh token issuance and verification.

Both tokens carry the same identity claims but are signed with different
secrets and tagged with their kind, so an access token never verifies as a
refresh token and the other way around. Nothing is stored server side: a
token stays valid until it expires or its secret is rotated.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import Settings, get_settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(self, settings: Settings) -> None:
        self._algorithm = settings.jwt_algorithm
        self._secrets = {
            ACCESS: settings.access_token_secret,
            REFRESH: settings.refresh_token_secret,
        }
        self._lifetimes = {
            ACCESS: timedelta(minutes=settings.access_token_expire_minutes),
            REFRESH: timedelta(days=settings.refresh_token_expire_days),
        }

    def issue_token_pair(self, user_id: str, email: str) -> TokenPair:
        now = datetime.now(timezone.utc)
        return TokenPair(
            access_token=self._encode(ACCESS, user_id, email, now),
            refresh_token=self._encode(REFRESH, user_id, email, now),
        )

    def verify_access(self, token: str) -> SessionClaims:
        return self._decode(ACCESS, token)

    def verify_refresh(self, token: str) -> SessionClaims:
        return self._decode(REFRESH, token)

    def _encode(self, kind: str, user_id: str, email: str, now: datetime) -> str:
        payload = {
            "sub": user_id,
            "email": email,
            "type": kind,
            "iat": now,
            "exp": now + self._lifetimes[kind],
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)

    def _decode(self, kind: str, token: str) -> SessionClaims:
        try:
            payload: dict[str, Any] = jwt.decode(token, self._secrets[kind], algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpired(f"{kind} token expired") from exc
        except JWTError as exc:
            raise TokenInvalid(f"invalid {kind} token") from exc

        user_id = payload.get("sub")
        email = payload.get("email")
        if payload.get("type") != kind or not isinstance(user_id, str) or not isinstance(email, str):
            raise TokenInvalid(f"malformed {kind} token payload")
        return SessionClaims(user_id=user_id, email=email)


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService(get_settings())
