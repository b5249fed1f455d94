"""Credential store: user accounts, profiles and stored API keys."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from notecanvas.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from notecanvas.models.user import User
from notecanvas.services.api_keys import decrypt_api_key, encrypt_api_key, mask_api_key
from notecanvas.services.auth import burn_password_check, get_password_hash, verify_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("bio", "banner", "avatar")


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively."""
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> User:
    """Get a user by id."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise StorageError() from e


def create_user(db: Session, email: str, password: str, name: str) -> User:
    """Create a new user with a hashed password."""
    email = normalize_email(email)
    if not name or not name.strip():
        raise ValidationError("Name is required", field="name")
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmailError()

    user = User(email=email, password_hash=get_password_hash(password), name=name.strip())
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent sign-up for the same email
        db.rollback()
        raise DuplicateEmailError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create user: {e}")
        raise StorageError() from e
    db.refresh(user)

    logger.info(f"Created user {user.id}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if user is None:
        burn_password_check()
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    return user


def update_profile(db: Session, user_id: int, name: str, **fields: str | None) -> User:
    """Update a user's profile. ``None`` leaves a field unchanged; name is required."""
    if not name or not name.strip():
        raise ValidationError("Name is required", field="name")

    user = get_user(db, user_id)
    user.name = name.strip()
    for field in PROFILE_FIELDS:
        value = fields.get(field)
        if value is not None:
            setattr(user, field, value)

    _commit(db, "update profile")
    db.refresh(user)
    return user


def set_api_key(db: Session, user_id: int, api_key: str) -> str:
    """Encrypt and store an API key. Returns only its masked form."""
    api_key = (api_key or "").strip()
    if not api_key:
        raise ValidationError("Invalid API key", field="apiKey")

    user = get_user(db, user_id)
    user.encrypted_api_key = encrypt_api_key(api_key)
    _commit(db, "save API key")

    logger.info(f"Stored API key for user {user_id}")
    return mask_api_key(api_key)


def get_api_key_status(db: Session, user_id: int) -> tuple[bool, str]:
    """Return whether a key is stored and its masked form."""
    user = get_user(db, user_id)
    if not user.has_api_key:
        return False, ""
    return True, mask_api_key(decrypt_api_key(user.encrypted_api_key))


def remove_api_key(db: Session, user_id: int) -> None:
    """Forget the user's API key."""
    user = get_user(db, user_id)
    user.encrypted_api_key = None
    _commit(db, "remove API key")
    logger.info(f"Removed API key for user {user_id}")


def get_decrypted_api_key(db: Session, user_id: int) -> str | None:
    """Raw key for server-side provider calls. Never send this to a client."""
    user = get_user(db, user_id)
    if not user.has_api_key:
        return None
    return decrypt_api_key(user.encrypted_api_key)
