"""Authentication service for session tokens and password handling."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from notecanvas.config import get_settings

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

BEARER_PREFIX = "bearer"


@dataclass(frozen=True)
class TokenIdentity:
    """Identity proven by a valid session token."""

    user_id: int
    email: str
    issued_at: datetime


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def burn_password_check() -> None:
    """Spend one hash verification so unknown accounts cost the same as known ones."""
    pwd_context.dummy_verify()


def create_access_token(
    user_id: int,
    email: str,
    issued_at: datetime | None = None,
    secret: str | None = None,
) -> str:
    """Create a signed session token."""
    issued_at = issued_at or datetime.now(UTC)
    expire = issued_at + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "iat": int(issued_at.timestamp()),
        "exp": expire,
    }
    return jwt.encode(to_encode, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, secret: str | None = None) -> dict | None:
    """Decode and validate a session token's signature and expiry."""
    try:
        return jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except (JWTError, AttributeError, TypeError, ValueError):
        return None


def verify_access_token(token: str, secret: str | None = None) -> TokenIdentity | None:
    """Resolve a token to the identity it proves, or None when it proves nothing."""
    payload = decode_access_token(token, secret=secret)
    if payload is None:
        return None

    try:
        return TokenIdentity(
            user_id=int(payload["sub"]),
            email=str(payload["email"]),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), UTC),
        )
    except (KeyError, TypeError, ValueError):
        return None


def extract_token_from_header(header: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        return None
    parts = header.strip().split()
    if len(parts) != 2 or parts[0].lower() != BEARER_PREFIX:
        return None
    return parts[1]
