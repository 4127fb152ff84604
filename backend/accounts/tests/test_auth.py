import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

User = get_user_model()


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def user(db):
    return User.objects.create_user(
        username="guest@example.com",
        email="guest@example.com",
        password="examplepass",
        full_name="Greta Guest",
    )


def test_register_creates_user_and_returns_tokens(db, client):
    payload = {
        "email": "New@Example.com",
        "password": "password123",
        "full_name": "New User",
    }
    response = client.post("/api/auth/register/", payload, format="json")

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["role"] == User.ROLE_USER
    assert "access" in body and "refresh" in body
    assert User.objects.filter(email="new@example.com").exists()


def test_register_with_existing_email_is_rejected(db, client, user):
    payload = {
        "email": "guest@example.com",
        "password": "password123",
    }
    response = client.post("/api/auth/register/", payload, format="json")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert "email" in body["details"]


def test_register_cannot_self_assign_admin_role(db, client):
    payload = {
        "email": "sneaky@example.com",
        "password": "password123",
        "role": "admin",
    }
    response = client.post("/api/auth/register/", payload, format="json")

    assert response.status_code == 201
    assert User.objects.get(email="sneaky@example.com").role == User.ROLE_USER


def test_login_returns_tokens_and_user_payload(db, client, user):
    response = client.post(
        "/api/auth/login/",
        {"email": "guest@example.com", "password": "examplepass"},
        format="json",
    )

    assert response.status_code == 200
    data = response.json()
    assert set(data.keys()) == {"access", "refresh", "user"}
    assert data["user"]["email"] == "guest@example.com"


def test_login_with_wrong_password_is_unauthenticated(db, client, user):
    response = client.post(
        "/api/auth/login/",
        {"email": "guest@example.com", "password": "nope-nope"},
        format="json",
    )

    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_ERROR"


def test_refresh_issues_new_access_token(db, client, user):
    login_response = client.post(
        "/api/auth/login/",
        {"email": "guest@example.com", "password": "examplepass"},
        format="json",
    )

    refresh_token = login_response.json()["refresh"]
    refresh_response = client.post(
        "/api/auth/refresh/", {"refresh": refresh_token}, format="json"
    )

    assert refresh_response.status_code == 200
    assert "access" in refresh_response.json()


def test_me_endpoint_returns_authenticated_user(db, client, user):
    login_response = client.post(
        "/api/auth/login/",
        {"email": "guest@example.com", "password": "examplepass"},
        format="json",
    )
    access = login_response.json()["access"]

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    response = client.get("/api/auth/me/")

    assert response.status_code == 200
    assert response.json()["email"] == "guest@example.com"


def test_me_endpoint_requires_authentication(db, client):
    response = client.get("/api/auth/me/")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": "Authentication credentials were not provided.",
        "code": "AUTHENTICATION_ERROR",
    }


def test_me_patch_updates_user_profile(db, client, user):
    client.force_authenticate(user=user)

    response = client.patch(
        "/api/auth/me/",
        {"full_name": "Updated Name", "email": "updated@example.com"},
        format="json",
    )

    assert response.status_code == 200
    assert response.json()["full_name"] == "Updated Name"
    user.refresh_from_db()
    assert user.email == "updated@example.com"
    assert user.username == "updated@example.com"


def test_change_password_requires_correct_current_password(db, client, user):
    client.force_authenticate(user=user)
    response = client.post(
        "/api/auth/change-password/",
        {"current_password": "wrongpass", "new_password": "newsecurepass"},
        format="json",
    )

    assert response.status_code == 400
    assert "current_password" in response.json()["details"]


def test_change_password_updates_password(db, client, user):
    client.force_authenticate(user=user)
    response = client.post(
        "/api/auth/change-password/",
        {"current_password": "examplepass", "new_password": "newsecurepass"},
        format="json",
    )

    assert response.status_code == 204
    user.refresh_from_db()
    assert user.check_password("newsecurepass")


def test_new_user_gets_default_notification_preferences(db, client, user):
    client.force_authenticate(user=user)

    response = client.get("/api/auth/me/")

    assert response.json()["notification_preferences"] == {
        "email_booking_confirmation": True,
        "email_booking_reminder": True,
        "email_marketing": False,
        "push_enabled": True,
    }


def test_me_patch_merges_notification_preferences(db, client, user):
    client.force_authenticate(user=user)

    response = client.patch(
        "/api/auth/me/",
        {"notification_preferences": {"email_marketing": True, "email_booking_confirmation": False}},
        format="json",
    )

    assert response.status_code == 200
    user.refresh_from_db()
    assert user.notification_preferences["email_marketing"] is True
    assert user.wants_notification("email_booking_confirmation") is False
    assert user.wants_notification("push_enabled") is True


def test_me_patch_rejects_non_boolean_preference(db, client, user):
    client.force_authenticate(user=user)

    response = client.patch(
        "/api/auth/me/",
        {"notification_preferences": {"push_enabled": "sometimes"}},
        format="json",
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
