from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.db import IntegrityError
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from bookings.models import Booking
from bookings.services.bookings import Stay, reserve_bookings
from cart.models import CartItem
from cart.services import add_to_cart
from core.exceptions import ConflictError, PaymentGatewayError
from payments import gateway
from payments.models import PaymentIntent
from payments.services import checkout as checkout_service
from properties.models import Property


def days(n):
    return timezone.localdate() + timedelta(days=n)


@pytest.fixture
def guest(db):
    return User.objects.create_user(
        username="guest@example.com",
        email="guest@example.com",
        password="password123",
        full_name="Greta Guest",
    )


@pytest.fixture
def rival(db):
    return User.objects.create_user(username="rival@example.com", email="rival@example.com", password="password123")


@pytest.fixture
def villa(db):
    return Property.objects.create(title="Jungle Villa", location="Ubud", price_per_night=Decimal("100.00"), max_guests=4)


@pytest.fixture
def client(guest):
    api_client = APIClient()
    api_client.force_authenticate(guest)
    return api_client


def test_checkout_creates_pending_bookings_and_intent(guest, villa):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    add_to_cart(guest, villa.id, days(20), days(21), 1)

    intent = checkout_service.checkout(guest)

    bookings = list(intent.bookings.order_by("start_date"))
    assert [booking.status for booking in bookings] == [Booking.PENDING, Booking.PENDING]
    assert intent.amount == Decimal("440.00")
    assert intent.status == PaymentIntent.PENDING
    assert intent.checkout_state == PaymentIntent.AWAITING_PAYMENT
    assert intent.order_id.startswith("ORDER-")
    assert intent.snap_token.startswith("snap_test_")
    # The cart is only cleared once the payment settles.
    assert CartItem.objects.filter(user=guest).count() == 2


def test_checkout_reprices_from_current_rate(guest, villa):
    add_to_cart(guest, villa.id, days(10), days(12), 2)
    villa.price_per_night = Decimal("150.00")
    villa.save()

    intent = checkout_service.checkout(guest)

    assert intent.amount == Decimal("330.00")
    assert intent.bookings.get().nightly_rate == Decimal("150.00")


def test_empty_cart_is_a_conflict(guest):
    with pytest.raises(ConflictError, match="Your cart is empty"):
        checkout_service.checkout(guest)


def test_unavailable_item_blocks_checkout_without_side_effects(guest, rival, villa):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    reserve_bookings(rival, [Stay(villa.id, days(11), days(12))])

    with pytest.raises(ConflictError) as excinfo:
        checkout_service.checkout(guest)

    assert excinfo.value.details["unavailable_item_ids"] == [CartItem.objects.get(user=guest).id]
    assert not Booking.objects.filter(user=guest).exists()
    assert not PaymentIntent.objects.exists()


def test_second_overlapping_checkout_is_rejected(guest, rival, villa):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    add_to_cart(rival, villa.id, days(12), days(14), 2)

    checkout_service.checkout(guest)
    with pytest.raises(ConflictError):
        checkout_service.checkout(rival)

    assert Booking.objects.filter(status__in=Booking.BLOCKING_STATUSES).count() == 1
    assert PaymentIntent.objects.count() == 1


def test_overlapping_items_in_one_cart_are_rejected(guest, villa):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    add_to_cart(guest, villa.id, days(12), days(14), 2)

    with pytest.raises(ConflictError):
        checkout_service.checkout(guest)

    assert not Booking.objects.exists()


def test_idempotency_key_replays_the_same_intent(guest, villa, monkeypatch):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    first = checkout_service.checkout(guest, idempotency_key="abc-123")

    def fail(**kwargs):
        raise AssertionError("gateway must not be called on replay")

    monkeypatch.setattr(gateway, "create_transaction", fail)
    second = checkout_service.checkout(guest, idempotency_key="abc-123")

    assert second.pk == first.pk
    assert Booking.objects.count() == 1


def test_gateway_failure_releases_bookings(guest, villa, monkeypatch):
    add_to_cart(guest, villa.id, days(10), days(13), 2)

    def fail(**kwargs):
        raise PaymentGatewayError()

    monkeypatch.setattr(gateway, "create_transaction", fail)

    with pytest.raises(PaymentGatewayError):
        checkout_service.checkout(guest)

    intent = PaymentIntent.objects.get()
    assert intent.checkout_state == PaymentIntent.ABANDONED
    assert intent.bookings.get().status == Booking.CANCELLED
    # Released dates are bookable again.
    monkeypatch.undo()
    assert checkout_service.checkout(guest).bookings.get().status == Booking.PENDING


def test_retry_with_key_of_failed_checkout_starts_fresh(guest, villa, monkeypatch):
    add_to_cart(guest, villa.id, days(10), days(13), 2)

    def fail(**kwargs):
        raise PaymentGatewayError()

    monkeypatch.setattr(gateway, "create_transaction", fail)
    with pytest.raises(PaymentGatewayError):
        checkout_service.checkout(guest, idempotency_key="k1")
    monkeypatch.undo()

    retry = checkout_service.checkout(guest, idempotency_key="k1")

    assert retry.checkout_state == PaymentIntent.AWAITING_PAYMENT
    assert retry.snap_token.startswith("snap_test_")
    assert retry.bookings.get().status == Booking.PENDING
    abandoned = PaymentIntent.objects.exclude(pk=retry.pk).get()
    assert abandoned.checkout_state == PaymentIntent.ABANDONED
    assert abandoned.idempotency_key is None


def test_database_overlap_rejection_becomes_conflict(guest, villa, monkeypatch):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    add_to_cart(guest, villa.id, days(20), days(22), 2)
    create = Booking.objects.create
    calls = []

    def create_then_collide(**kwargs):
        calls.append(kwargs)
        if len(calls) == 2:
            raise IntegrityError("booking_no_overlap")
        return create(**kwargs)

    monkeypatch.setattr(Booking.objects, "create", create_then_collide)

    with pytest.raises(ConflictError, match="not available"):
        checkout_service.checkout(guest)

    assert not Booking.objects.exists()
    assert not PaymentIntent.objects.exists()
    assert CartItem.objects.filter(user=guest).count() == 2


def test_unexpected_gateway_exception_is_wrapped(guest, villa, monkeypatch):
    add_to_cart(guest, villa.id, days(10), days(13), 2)

    def boom(**kwargs):
        raise RuntimeError("socket closed")

    monkeypatch.setattr(gateway, "create_transaction", boom)

    with pytest.raises(PaymentGatewayError):
        checkout_service.checkout(guest)
    assert PaymentIntent.objects.get().checkout_state == PaymentIntent.ABANDONED


def test_checkout_endpoint_reads_idempotency_header(client, guest, villa):
    add_to_cart(guest, villa.id, days(10), days(13), 2)

    first = client.post("/api/checkout/", {}, format="json", HTTP_IDEMPOTENCY_KEY="key-1")
    second = client.post("/api/checkout/", {}, format="json", HTTP_IDEMPOTENCY_KEY="key-1")

    assert first.status_code == 201
    body = first.json()
    assert body["amount"] == "330.00"
    assert body["checkout_state"] == "awaiting_payment"
    assert len(body["booking_ids"]) == 1
    assert second.json()["id"] == body["id"]


def test_checkout_endpoint_gateway_failure_body(client, guest, villa, monkeypatch):
    add_to_cart(guest, villa.id, days(10), days(13), 2)

    def fail(**kwargs):
        raise PaymentGatewayError()

    monkeypatch.setattr(gateway, "create_transaction", fail)

    response = client.post("/api/checkout/", {}, format="json")

    assert response.status_code == 502
    assert response.json()["code"] == "PAYMENT_GATEWAY_ERROR"


def test_pay_single_booking(client, guest, villa):
    [booking] = reserve_bookings(guest, [Stay(villa.id, days(10), days(12))])

    response = client.post(f"/api/bookings/{booking.id}/pay/")

    assert response.status_code == 201
    assert response.json()["booking_ids"] == [booking.id]
    assert response.json()["amount"] == "220.00"

    again = client.post(f"/api/bookings/{booking.id}/pay/")
    assert again.status_code == 409


def test_pay_requires_pending_booking(client, guest, villa):
    [booking] = reserve_bookings(guest, [Stay(villa.id, days(10), days(12))])
    booking.mark(Booking.CONFIRMED)

    response = client.post(f"/api/bookings/{booking.id}/pay/")

    assert response.status_code == 409


def test_payment_detail_is_owner_only(client, guest, rival, villa):
    add_to_cart(rival, villa.id, days(10), days(13), 2)
    intent = checkout_service.checkout(rival)

    assert client.get(f"/api/payments/{intent.id}/").status_code == 404

    other = APIClient()
    other.force_authenticate(rival)
    assert other.get(f"/api/payments/{intent.id}/").json()["order_id"] == intent.order_id


def test_reaper_abandons_stale_checkouts(guest, villa):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    stale = checkout_service.checkout(guest)
    PaymentIntent.objects.filter(pk=stale.pk).update(created_at=timezone.now() - timedelta(days=2))
    add_to_cart(guest, villa.id, days(20), days(21), 1)
    CartItem.objects.filter(start_date=days(10)).delete()
    fresh = checkout_service.checkout(guest)

    assert checkout_service.reap_abandoned_checkouts() == 1

    stale.refresh_from_db()
    fresh.refresh_from_db()
    assert stale.checkout_state == PaymentIntent.ABANDONED
    assert stale.bookings.get().status == Booking.CANCELLED
    assert fresh.checkout_state == PaymentIntent.AWAITING_PAYMENT


def test_reaper_command(guest, villa, capsys):
    add_to_cart(guest, villa.id, days(10), days(13), 2)
    checkout_service.checkout(guest)

    call_command("reap_abandoned_checkouts", "--minutes", "0")

    assert "Abandoned 1 checkout(s)." in capsys.readouterr().out
