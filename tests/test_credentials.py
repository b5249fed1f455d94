"""Tests for the credential store."""

import pytest

from notecanvas.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from notecanvas.services.credentials import (
    authenticate_user,
    create_user,
    get_api_key_status,
    get_decrypted_api_key,
    remove_api_key,
    set_api_key,
    update_profile,
)


@pytest.fixture
def alice(db):
    return create_user(db, "Alice@Example.com", "secret1", "Alice")


def test_create_user_normalizes_email(alice):
    assert alice.email == "alice@example.com"
    assert alice.password_hash != "secret1"


def test_create_user_duplicate(db, alice):
    with pytest.raises(DuplicateEmailError):
        create_user(db, "ALICE@example.com", "another", "Alice Two")


def test_create_user_requires_name(db):
    with pytest.raises(ValidationError) as exc_info:
        create_user(db, "bob@example.com", "secret1", "  ")
    assert exc_info.value.field == "name"


def test_authenticate(db, alice):
    assert authenticate_user(db, "alice@example.com", "secret1").id == alice.id


@pytest.mark.parametrize("password", ["wrongpass", "secret", "secret12", "SECRET1", ""])
def test_authenticate_wrong_password(db, alice, password):
    with pytest.raises(InvalidCredentialsError):
        authenticate_user(db, "alice@example.com", password)


def test_authenticate_unknown_email(db):
    with pytest.raises(InvalidCredentialsError):
        authenticate_user(db, "nobody@example.com", "secret1")


def test_update_profile_partial(db, alice):
    update_profile(db, alice.id, "Alice", bio="Hello", avatar="data:image/png;base64,AA==")
    user = update_profile(db, alice.id, "Alice A", banner="forest")

    assert user.name == "Alice A"
    assert user.bio == "Hello"
    assert user.banner == "forest"
    assert user.avatar == "data:image/png;base64,AA=="


def test_update_profile_missing_user(db):
    with pytest.raises(NotFoundError):
        update_profile(db, 999999, "Ghost")


def test_api_key_lifecycle(db, alice):
    assert get_api_key_status(db, alice.id) == (False, "")
    assert get_decrypted_api_key(db, alice.id) is None

    masked = set_api_key(db, alice.id, "  sk-test-1234567890  ")

    assert masked == "sk-t" + "•" * 12 + "7890"
    assert get_api_key_status(db, alice.id) == (True, masked)
    assert get_decrypted_api_key(db, alice.id) == "sk-test-1234567890"

    remove_api_key(db, alice.id)
    assert get_api_key_status(db, alice.id) == (False, "")


def test_blank_api_key(db, alice):
    with pytest.raises(ValidationError) as exc_info:
        set_api_key(db, alice.id, "   ")
    assert exc_info.value.field == "apiKey"
