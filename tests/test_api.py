"""API endpoint tests for auth, profile and API key settings."""

from unittest.mock import patch

from conftest import sign_up

from notecanvas.models.user import User


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_signup(client):
    """Test user sign-up returns a token and public profile."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "newuser@example.com", "password": "password123", "name": "New User"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["token"]
    assert data["user"]["email"] == "newuser@example.com"
    assert data["user"]["name"] == "New User"
    assert "password" not in str(data["user"]).lower()


def test_signup_normalizes_email(client, db):
    """Test emails are stored lowercased."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "Mixed.Case@Example.com", "password": "password123", "name": "Mixed"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "mixed.case@example.com"


def test_signup_stores_only_password_hash(client, db):
    """Test the plaintext password never reaches the database."""
    sign_up(client, "hash@example.com", "secret1")
    user = db.query(User).filter(User.email == "hash@example.com").one()
    assert user.password_hash != "secret1"
    assert "secret1" not in user.password_hash


def test_signup_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails with 409."""
    response = client.post(
        "/api/auth/signup",
        json={"email": auth_headers.email, "password": "password123", "name": "Duplicate"},
    )
    assert response.status_code == 409
    assert response.json()["success"] is False
    assert "already exists" in response.json()["error"]


def test_signup_duplicate_email_is_case_insensitive(client, auth_headers):
    """Test duplicates are detected regardless of case."""
    response = client.post(
        "/api/auth/signup",
        json={"email": auth_headers.email.upper(), "password": "password123", "name": "Dup"},
    )
    assert response.status_code == 409


def test_signup_short_password(client):
    """Test sign-up rejects passwords under six characters."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "short@example.com", "password": "12345", "name": "Short"},
    )
    assert response.status_code == 400
    assert "password" in response.json()["error"]


def test_signup_missing_name(client):
    """Test sign-up requires a name."""
    response = client.post(
        "/api/auth/signup",
        json={"email": "noname@example.com", "password": "password123"},
    )
    assert response.status_code == 400


def test_signup_then_signin_scenario(client):
    """Sign up alice, sign in with the right and the wrong password."""
    sign_up(client, "alice@example.com", "secret1", name="Alice")

    response = client.post(
        "/api/auth/signin", json={"email": "alice@example.com", "password": "secret1"}
    )
    assert response.status_code == 200
    assert response.json()["token"]

    response = client.post(
        "/api/auth/signin", json={"email": "alice@example.com", "password": "wrongpass"}
    )
    assert response.status_code == 401
    assert "token" not in response.json()


def test_signin_unknown_email_same_message(client, auth_headers):
    """Test unknown email and wrong password are indistinguishable."""
    wrong_password = client.post(
        "/api/auth/signin", json={"email": auth_headers.email, "password": "nope-nope"}
    )
    unknown_email = client.post(
        "/api/auth/signin", json={"email": "ghost@example.com", "password": "nope-nope"}
    )
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json()["error"] == unknown_email.json()["error"]


def test_signin_unknown_email_still_hashes(client):
    """Test an unknown email still spends a password check."""
    with patch("notecanvas.services.credentials.burn_password_check") as mock_burn:
        response = client.post(
            "/api/auth/signin", json={"email": "ghost@example.com", "password": "whatever"}
        )
    assert response.status_code == 401
    mock_burn.assert_called_once()


def test_signin_is_case_insensitive(client, auth_headers):
    """Test sign-in accepts the email in any case."""
    response = client.post(
        "/api/auth/signin", json={"email": auth_headers.email.upper(), "password": "testpass123"}
    )
    assert response.status_code == 200


def test_signin_missing_password(client):
    """Test sign-in without a password is a 400."""
    response = client.post("/api/auth/signin", json={"email": "a@example.com"})
    assert response.status_code == 400


def test_verify(client, auth_headers):
    """Test verifying a token returns the current user."""
    response = client.get("/api/auth/verify", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["user"]["id"] == auth_headers.user_id


def test_verify_without_token(client):
    """Test verify rejects requests without a bearer token."""
    response = client.get("/api/auth/verify")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_verify_malformed_header(client, auth_headers):
    """Test a non-bearer authorization header is rejected."""
    response = client.get("/api/auth/verify", headers={"Authorization": f"Token {auth_headers.token}"})
    assert response.status_code == 401


def test_verify_tampered_token(client, auth_headers):
    """Test a token with a modified signature is rejected."""
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
    token = auth_headers.token
    # Shift by 16 so the significant bits of the last character change
    replacement = alphabet[(alphabet.index(token[-1]) + 16) % 64]
    tampered = token[:-1] + replacement
    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {tampered}"})
    assert response.status_code == 401


def test_verify_deleted_user(client, db, auth_headers):
    """Test a valid token for a user that no longer exists is a 404."""
    db.query(User).filter(User.id == auth_headers.user_id).delete()
    db.commit()

    response = client.get("/api/auth/verify", headers=auth_headers)
    assert response.status_code == 404


def test_update_profile(client, auth_headers):
    """Test updating the profile."""
    response = client.post(
        "/api/user/update",
        headers=auth_headers,
        json={"name": "Renamed", "bio": "Writes notes", "banner": "sunset"},
    )
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["name"] == "Renamed"
    assert user["bio"] == "Writes notes"
    assert user["banner"] == "sunset"


def test_update_profile_is_partial(client, auth_headers):
    """Test fields left out of the update keep their values."""
    client.post(
        "/api/user/update", headers=auth_headers, json={"name": "First", "bio": "Keep me"}
    )
    response = client.post("/api/user/update", headers=auth_headers, json={"name": "Second"})
    assert response.status_code == 200
    assert response.json()["user"]["bio"] == "Keep me"
    assert response.json()["user"]["name"] == "Second"


def test_update_profile_requires_name(client, auth_headers):
    """Test an empty name is rejected."""
    response = client.post("/api/user/update", headers=auth_headers, json={"name": "   "})
    assert response.status_code == 400


def test_update_profile_requires_auth(client):
    """Test profile updates need a token."""
    response = client.post("/api/user/update", json={"name": "Anon"})
    assert response.status_code == 401


def test_api_key_scenario(client, auth_headers):
    """Set, inspect and remove a provider API key."""
    response = client.get("/api/settings/api-key", headers=auth_headers)
    assert response.json() == {"hasKey": False, "maskedKey": ""}

    response = client.post(
        "/api/settings/api-key", headers=auth_headers, json={"apiKey": "sk-test-1234567890"}
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["maskedKey"] == "sk-t" + "•" * 12 + "7890"

    response = client.get("/api/settings/api-key", headers=auth_headers)
    status_data = response.json()
    assert status_data["hasKey"] is True
    assert status_data["maskedKey"].startswith("sk-t")
    assert status_data["maskedKey"].endswith("7890")
    assert "1234567890" not in status_data["maskedKey"]

    response = client.delete("/api/settings/api-key", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.get("/api/settings/api-key", headers=auth_headers)
    assert response.json()["hasKey"] is False


def test_api_key_is_encrypted_at_rest(client, db, auth_headers):
    """Test the stored value is not the raw key."""
    client.post("/api/settings/api-key", headers=auth_headers, json={"apiKey": "sk-live-abcdef123456"})
    user = db.get(User, auth_headers.user_id)
    db.refresh(user)
    assert user.encrypted_api_key
    assert "sk-live-abcdef123456" not in user.encrypted_api_key


def test_api_key_blank_rejected(client, auth_headers):
    """Test a whitespace-only key is a 400."""
    response = client.post("/api/settings/api-key", headers=auth_headers, json={"apiKey": "   "})
    assert response.status_code == 400


def test_api_key_requires_auth(client):
    """Test API key endpoints need a token."""
    assert client.get("/api/settings/api-key").status_code == 401
    assert client.post("/api/settings/api-key", json={"apiKey": "sk-x-12345678"}).status_code == 401
    assert client.delete("/api/settings/api-key").status_code == 401
