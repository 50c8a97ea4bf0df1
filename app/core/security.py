"""Password hashing."""

from passlib.context import CryptContext

from app.config import get_settings

settings = get_settings()
pwd_context = CryptContext(schemes=settings.PASSWORD_SCHEMES, deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Spend the time of a real verify so unknown emails are not distinguishable."""
    pwd_context.dummy_verify()
