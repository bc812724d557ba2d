"""Signup, login, token refresh and password reset."""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, UnauthorizedError, ValidationError
from app.core.security import dummy_verify, hash_password, validate_password_strength, verify_password
from app.core.tokens import TokenError, TokenPair, TokenService
from app.models.user import User

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


def normalize_email(value: str | None) -> str:
    return _clean(value).lower()


class AuthService:
    def __init__(self, db: Session, tokens: TokenService) -> None:
        self.db = db
        self.tokens = tokens

    def signup(
        self,
        name: str | None,
        phone: str | None,
        email: str | None,
        password: str | None,
        confirm_password: str | None,
    ) -> User:
        name, phone, email = _clean(name), _clean(phone), normalize_email(email)
        if not (name and phone and email and password and confirm_password):
            raise ValidationError("All fields are required")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")

        existing = self.db.scalar(select(User.id).where(or_(User.email == email, User.phone == phone)).limit(1))
        if existing:
            raise ConflictError()

        user = User(name=name, phone=phone, email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # A concurrent signup won the race for the same email or phone.
            self.db.rollback()
            raise ConflictError() from exc
        self.db.refresh(user)
        logger.info("user signed up", extra={"user_id": user.id})
        return user

    def login(self, email: str | None, phone: str | None, password: str | None) -> tuple[User, TokenPair]:
        email, phone = normalize_email(email), _clean(phone)
        if not password or not (email or phone):
            raise ValidationError("All fields are required")

        conditions = []
        if email:
            conditions.append(User.email == email)
        if phone:
            conditions.append(User.phone == phone)
        user = self.db.scalar(select(User).where(or_(*conditions)).limit(1))
        if user is None:
            dummy_verify()
            raise UnauthorizedError()
        if not verify_password(password, user.password_hash):
            raise UnauthorizedError()
        return user, self.tokens.issue_token_pair(user.id, user.email)

    def refresh(self, refresh_token: str | None) -> tuple[User, TokenPair]:
        if not refresh_token:
            raise UnauthorizedError()
        try:
            claims = self.tokens.verify_refresh(refresh_token)
        except TokenError as exc:
            logger.info("refresh rejected: %s", exc)
            raise UnauthorizedError() from exc
        user = self.db.get(User, claims.user_id)
        if user is None:
            raise UnauthorizedError()
        return user, self.tokens.issue_token_pair(user.id, user.email)

    def reset_password(self, user: User, current_password: str | None, new_password: str | None) -> None:
        if not current_password or not new_password:
            raise ValidationError("All fields are required")
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")
        validate_password_strength(new_password)
        user.password_hash = hash_password(new_password)
        self.db.add(user)
        self.db.commit()
        logger.info("password reset", extra={"user_id": user.id})
