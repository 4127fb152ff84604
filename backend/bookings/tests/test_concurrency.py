import threading
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import IntegrityError, connection, connections, transaction
from django.utils import timezone

from accounts.models import User
from bookings.models import Booking
from cart.services import add_to_cart
from core.exceptions import ConflictError
from payments.models import PaymentIntent
from payments.services.checkout import checkout
from properties.models import Property

pytestmark = [
    pytest.mark.django_db(transaction=True),
    pytest.mark.skipif(connection.vendor != "postgresql", reason="row locks and exclusion constraints need PostgreSQL"),
]


def days(n):
    return timezone.localdate() + timedelta(days=n)


def test_concurrent_overlapping_checkouts_book_once():
    villa = Property.objects.create(title="Cliff Villa", location="Uluwatu", price_per_night=Decimal("100.00"), max_guests=4)
    guests = [
        User.objects.create_user(username=f"guest{n}@example.com", email=f"guest{n}@example.com", password="password123")
        for n in range(4)
    ]
    for guest in guests:
        add_to_cart(guest, villa.id, days(10), days(13), 2)

    barrier = threading.Barrier(len(guests))
    outcomes = []

    def run(guest):
        try:
            barrier.wait()
            checkout(guest)
            outcomes.append("booked")
        except ConflictError:
            outcomes.append("conflict")
        finally:
            connections.close_all()

    threads = [threading.Thread(target=run, args=(guest,)) for guest in guests]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["booked", "conflict", "conflict", "conflict"]
    assert Booking.objects.filter(property=villa, status__in=Booking.BLOCKING_STATUSES).count() == 1
    assert PaymentIntent.objects.count() == 1


def test_exclusion_constraint_rejects_direct_overlap():
    villa = Property.objects.create(title="Rice Field Villa", location="Ubud", price_per_night=Decimal("100.00"), max_guests=4)
    guest = User.objects.create_user(username="guest@example.com", email="guest@example.com", password="password123")
    fields = dict(
        user=guest,
        property=villa,
        guests=1,
        nightly_rate=Decimal("100.00"),
        service_fee=Decimal("30.00"),
        total_price=Decimal("330.00"),
        status=Booking.PENDING,
    )
    Booking.objects.create(start_date=days(10), end_date=days(13), **fields)

    with pytest.raises(IntegrityError), transaction.atomic():
        Booking.objects.create(start_date=days(12), end_date=days(14), **fields)
    Booking.objects.create(start_date=days(13), end_date=days(15), **fields)
