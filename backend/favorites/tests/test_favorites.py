from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.models import User
from core.exceptions import ConflictError, NotFoundError
from favorites import services
from favorites.models import Favorite
from properties.models import Property


@pytest.fixture
def guest(db):
    return User.objects.create_user(
        username="guest@example.com",
        email="guest@example.com",
        password="password123",
        full_name="Greta Guest",
    )


@pytest.fixture
def villa(db):
    return Property.objects.create(title="Beach Villa", location="Seminyak", price_per_night=Decimal("100.00"), max_guests=4)


@pytest.fixture
def cabin(db):
    return Property.objects.create(title="Lake Cabin", location="Bedugul", price_per_night=Decimal("80.00"), max_guests=2)


@pytest.fixture
def client(guest):
    api_client = APIClient()
    api_client.force_authenticate(guest)
    return api_client


def test_add_and_check_favorite(guest, villa):
    favorite = services.add_to_favorites(guest, villa.id)

    assert favorite.property == villa
    assert services.is_favorite(guest, villa.id) is True


def test_duplicate_favorite_is_a_conflict(guest, villa):
    services.add_to_favorites(guest, villa.id)

    with pytest.raises(ConflictError, match="already in favorites"):
        services.add_to_favorites(guest, villa.id)
    assert Favorite.objects.count() == 1


def test_favorite_requires_active_property(guest, villa):
    villa.is_active = False
    villa.save()

    with pytest.raises(NotFoundError):
        services.add_to_favorites(guest, villa.id)


def test_remove_missing_favorite_is_not_found(guest, villa):
    with pytest.raises(NotFoundError, match="Favorite not found"):
        services.remove_from_favorites(guest, villa.id)


def test_list_is_newest_first_and_paginated(client, guest, villa, cabin):
    services.add_to_favorites(guest, villa.id)
    services.add_to_favorites(guest, cabin.id)

    response = client.get("/api/favorites/", {"limit": 1})

    assert response.status_code == 200
    body = response.json()
    assert [prop["title"] for prop in body["properties"]] == ["Lake Cabin"]
    assert body["total"] == 2
    assert body["total_pages"] == 2
    assert body["has_more"] is True


def test_add_and_remove_through_api(client, guest, villa):
    created = client.post("/api/favorites/", {"property_id": villa.id}, format="json")
    duplicate = client.post("/api/favorites/", {"property_id": villa.id}, format="json")

    assert created.status_code == 201
    assert created.json()["property_id"] == villa.id
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "CONFLICT"
    assert client.get(f"/api/favorites/{villa.id}/").json() == {"is_favorite": True}

    assert client.delete(f"/api/favorites/{villa.id}/").status_code == 204
    assert client.delete(f"/api/favorites/{villa.id}/").status_code == 404
    assert client.get(f"/api/favorites/{villa.id}/").json() == {"is_favorite": False}


def test_anonymous_check_is_false_and_list_needs_login(db, villa):
    anonymous = APIClient()

    assert anonymous.get(f"/api/favorites/{villa.id}/").json() == {"is_favorite": False}
    assert anonymous.get("/api/favorites/").status_code == 401
