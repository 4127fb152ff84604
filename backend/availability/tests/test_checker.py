from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.models import User
from availability.services.checker import check_availability, date_ranges_overlap
from bookings.models import Booking
from core.exceptions import ValidationError
from properties.models import Property


@pytest.fixture
def guest(db):
    return User.objects.create_user(username="guest@example.com", email="guest@example.com", password="password123")


@pytest.fixture
def villa(db):
    return Property.objects.create(title="Cliff Villa", location="Uluwatu", price_per_night=Decimal("100.00"), max_guests=4)


def make_booking(guest, villa, start, end, status=Booking.CONFIRMED):
    return Booking.objects.create(
        user=guest,
        property=villa,
        start_date=start,
        end_date=end,
        nightly_rate=Decimal("100.00"),
        service_fee=Decimal("10.00"),
        total_price=Decimal("110.00"),
        status=status,
    )


@pytest.mark.parametrize(
    "first, second, expected",
    [
        ((date(2024, 1, 1), date(2024, 1, 5)), (date(2024, 1, 3), date(2024, 1, 7)), True),
        ((date(2024, 1, 1), date(2024, 1, 5)), (date(2024, 1, 2), date(2024, 1, 3)), True),
        ((date(2024, 1, 1), date(2024, 1, 5)), (date(2024, 1, 5), date(2024, 1, 8)), False),
        ((date(2024, 1, 1), date(2024, 1, 5)), (date(2024, 1, 6), date(2024, 1, 8)), False),
    ],
)
def test_overlap_is_symmetric(first, second, expected):
    assert date_ranges_overlap(*first, *second) is expected
    assert date_ranges_overlap(*second, *first) is expected


def test_checkout_day_can_be_next_checkin(guest, villa):
    make_booking(guest, villa, date(2030, 1, 1), date(2030, 1, 5))

    assert check_availability(villa.id, date(2030, 1, 5), date(2030, 1, 8)).available
    assert check_availability(villa.id, date(2029, 12, 28), date(2030, 1, 1)).available


def test_overlap_reports_conflicting_ranges(guest, villa):
    make_booking(guest, villa, date(2030, 1, 1), date(2030, 1, 5))
    make_booking(guest, villa, date(2030, 1, 10), date(2030, 1, 12), status=Booking.PENDING)

    result = check_availability(villa.id, date(2030, 1, 4), date(2030, 1, 11))

    assert result.available is False
    assert result.as_dict() == {
        "available": False,
        "conflicting_dates": [
            {"start": "2030-01-01", "end": "2030-01-05"},
            {"start": "2030-01-10", "end": "2030-01-12"},
        ],
    }


def test_cancelled_bookings_never_block(guest, villa):
    make_booking(guest, villa, date(2030, 1, 1), date(2030, 1, 5), status=Booking.CANCELLED)

    assert check_availability(villa.id, date(2030, 1, 2), date(2030, 1, 3)).as_dict() == {"available": True}


def test_completed_bookings_block(guest, villa):
    make_booking(guest, villa, date(2030, 1, 1), date(2030, 1, 5), status=Booking.COMPLETED)

    assert not check_availability(villa.id, date(2030, 1, 2), date(2030, 1, 3)).available


def test_excluded_booking_does_not_block_itself(guest, villa):
    booking = make_booking(guest, villa, date(2030, 1, 1), date(2030, 1, 5))

    assert check_availability(villa.id, date(2030, 1, 1), date(2030, 1, 5), exclude_booking_ids=[booking.id]).available


def test_end_before_start_is_rejected(villa):
    with pytest.raises(ValidationError):
        check_availability(villa.id, date(2030, 1, 5), date(2030, 1, 5))


def test_public_check_endpoint(guest, villa):
    make_booking(guest, villa, date(2030, 1, 1), date(2030, 1, 5))
    client = APIClient()

    response = client.post(
        "/api/availability/check/",
        {"property_id": villa.id, "start_date": "2030-01-03", "end_date": "2030-01-06"},
        format="json",
    )

    assert response.status_code == 200
    assert response.json() == {
        "available": False,
        "conflicting_dates": [{"start": "2030-01-01", "end": "2030-01-05"}],
    }


def test_public_check_endpoint_validates_dates(villa):
    response = APIClient().post(
        "/api/availability/check/",
        {"property_id": villa.id, "start_date": "2030-01-06", "end_date": "2030-01-03"},
        format="json",
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "end_date" in body["details"]


def test_public_check_endpoint_unknown_property(db):
    response = APIClient().post(
        "/api/availability/check/",
        {"property_id": 999, "start_date": "2030-01-03", "end_date": "2030-01-06"},
        format="json",
    )

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Property not found", "code": "NOT_FOUND"}
