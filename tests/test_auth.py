"""Tests for authentication."""
import pytest
from duetasks.services.auth_service import AuthService
from duetasks.core.exceptions import ConflictError, UnauthorizedError
from duetasks.schemas.user import UserCreate
from duetasks.utils.security import verify_password, create_access_token, create_refresh_token, decode_token


def test_password_hashing():
    """Test password hashing and verification."""
    password = "testpassword123"
    hashed = AuthService.hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("wrongpassword", hashed)


def test_jwt_token_creation():
    """Test JWT token creation and decoding."""
    data = {"sub": "user123", "email": "test@example.com"}
    token = create_access_token(data)

    assert token is not None
    assert isinstance(token, str)

    decoded = decode_token(token)
    assert decoded["sub"] == "user123"
    assert decoded["email"] == "test@example.com"
    assert decoded["type"] == "access"


def test_decode_rejects_garbage():
    with pytest.raises(ValueError):
        decode_token("not-a-token")


@pytest.mark.asyncio
async def test_authenticate_user(db_session, test_user):
    """Test user authentication."""
    # Test correct credentials
    user = await AuthService.authenticate_user(
        db_session,
        "test@example.com",
        "testpassword",
    )
    assert user is not None
    assert user.email == "test@example.com"

    # Test incorrect password
    user = await AuthService.authenticate_user(
        db_session,
        "test@example.com",
        "wrongpassword",
    )
    assert user is None

    # Test non-existent user
    user = await AuthService.authenticate_user(
        db_session,
        "nonexistent@example.com",
        "password",
    )
    assert user is None


@pytest.mark.asyncio
async def test_register_user_rejects_duplicate_email(db_session, test_user):
    with pytest.raises(ConflictError):
        await AuthService.register_user(
            db_session, UserCreate(email="test@example.com", password="secret123")
        )


@pytest.mark.asyncio
async def test_refresh_requires_refresh_token(db_session, test_user):
    access = create_access_token({"sub": str(test_user.id)})
    with pytest.raises(UnauthorizedError):
        await AuthService.refresh_access_token(db_session, access)

    refresh = create_refresh_token({"sub": str(test_user.id)})
    tokens = await AuthService.refresh_access_token(db_session, refresh)
    assert decode_token(tokens["access_token"])["sub"] == str(test_user.id)


def test_sign_up_login_and_me(client):
    response = client.post(
        "/api/v1/auth/sign-up",
        json={"email": "new@example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    assert response.json()["email"] == "new@example.com"

    response = client.post(
        "/api/v1/auth/login",
        data={"username": "new@example.com", "password": "secret123"},
    )
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "bearer"

    response = client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
    )
    assert response.status_code == 200
    assert response.json()["email"] == "new@example.com"


def test_login_with_wrong_password(client, test_user):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": "test@example.com", "password": "nope"},
    )
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "UNAUTHORIZED"


def test_protected_endpoint_requires_token(client):
    response = client.get("/api/v1/tasks")
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "UNAUTHORIZED"


def test_refresh_endpoint(client, test_user):
    refresh = create_refresh_token({"sub": str(test_user.id)})
    response = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
    assert response.status_code == 200
    assert "access_token" in response.json()
