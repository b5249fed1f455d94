"""Tests for API key encryption and masking."""

import pytest
from cryptography.fernet import Fernet

from notecanvas.exceptions import StorageError
from notecanvas.services import api_keys
from notecanvas.services.api_keys import decrypt_api_key, encrypt_api_key, mask_api_key


def test_encrypt_round_trip():
    encrypted = encrypt_api_key("sk-test-1234567890")
    assert encrypted != "sk-test-1234567890"
    assert decrypt_api_key(encrypted) == "sk-test-1234567890"


def test_encryption_is_randomized():
    assert encrypt_api_key("sk-same") != encrypt_api_key("sk-same")


def test_decrypt_garbage_is_storage_error():
    with pytest.raises(StorageError):
        decrypt_api_key("definitely-not-fernet")


def test_passphrase_and_fernet_key_both_accepted():
    fernet_key = Fernet.generate_key().decode()
    direct = api_keys._fernet(fernet_key)
    derived = api_keys._fernet("a plain passphrase")

    assert direct.decrypt(direct.encrypt(b"x")) == b"x"
    assert derived.decrypt(derived.encrypt(b"y")) == b"y"


@pytest.mark.parametrize(
    "api_key,expected",
    [
        ("sk-test-1234567890", "sk-t" + "•" * 12 + "7890"),
        ("abcdefgh", "abcd" + "•" * 12 + "efgh"),
        ("short", "•" * 16),
        ("", "•" * 16),
    ],
)
def test_mask_api_key(api_key, expected):
    assert mask_api_key(api_key) == expected
