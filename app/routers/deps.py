import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.errors import UnauthorizedError
from app.core.tokens import TokenExpired, TokenInvalid, TokenService, get_token_service
from app.db.session import get_db
from app.models.user import User
from app.services.auth import AuthService
from app.services.gallery import GalleryService
from app.services.media import MediaStore, get_media_store

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"


def extract_access_token(request: Request) -> str | None:
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    token = extract_access_token(request)
    if token is None:
        raise UnauthorizedError(should_refresh=True)
    try:
        claims = tokens.verify_access(token)
    except TokenExpired:
        raise UnauthorizedError(should_refresh=True) from None
    except TokenInvalid as exc:
        logger.info("access token rejected: %s", exc)
        raise UnauthorizedError() from None

    # Looked up on every request so removed accounts lose access immediately.
    user = db.get(User, claims.user_id)
    if user is None:
        raise UnauthorizedError()
    return user


def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, tokens)


def get_gallery_service(
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
) -> GalleryService:
    return GalleryService(db, media)
