import re
from functools import lru_cache

from passlib.context import CryptContext

from app.core.config import get_settings
from app.core.errors import ValidationError

PASSWORD_SYMBOLS = "!@#$%^&*"
PASSWORD_POLICY = re.compile(r"^(?=.*[A-Z])(?=.*[a-z])(?=.*[0-9])(?=.*[!@#$%^&*]).{8,}$")


@lru_cache(maxsize=1)
def get_password_context() -> CryptContext:
    # bcrypt only looks at the first 72 bytes of a secret; longer input is accepted and truncated.
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=get_settings().bcrypt_rounds)


def hash_password(password: str) -> str:
    return get_password_context().hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return get_password_context().verify(password, hashed_password)


def dummy_verify() -> None:
    """Spend the same time as a real verification when no user matched."""
    get_password_context().dummy_verify()


def validate_password_strength(password: str) -> None:
    if not PASSWORD_POLICY.match(password):
        raise ValidationError(
            "Password must be at least 8 characters and contain an uppercase letter, "
            f"a lowercase letter, a digit and one of {PASSWORD_SYMBOLS}"
        )
