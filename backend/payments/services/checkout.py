"""
Cart checkout as a saga.

1. replay an earlier checkout carrying the same idempotency key;
2. reserve one pending booking per cart item and record the payment intent
   in a single transaction;
3. ask the gateway for a payment page outside that transaction;
4. if the gateway fails, cancel the fresh bookings and abandon the intent.

The cart is left alone here; the settlement webhook clears it.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from bookings.models import Booking
from bookings.services.bookings import Stay, reserve_bookings
from cart.services import get_cart
from core.exceptions import ConflictError, PaymentGatewayError
from payments import gateway
from payments.models import PaymentIntent

logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    return f"ORDER-{int(time.time() * 1000)}-{uuid4().hex[:8]}"


def _find_replay(user, idempotency_key):
    if not idempotency_key:
        return None
    return PaymentIntent.objects.filter(user=user, idempotency_key=idempotency_key).first()


def _customer_details(user) -> dict:
    details = {"first_name": user.display_name or "Guest", "email": user.email or ""}
    if user.phone:
        details["phone"] = user.phone
    return details


def _create_intent(user, bookings: list[Booking], idempotency_key=None) -> PaymentIntent:
    intent = PaymentIntent.objects.create(
        user=user,
        order_id=generate_order_id(),
        amount=sum((booking.total_price for booking in bookings), Decimal("0.00")),
        currency=settings.BOOKING_CURRENCY,
        idempotency_key=idempotency_key or None,
    )
    intent.bookings.set(bookings)
    return intent


def _release(intent: PaymentIntent):
    # An abandoned intent no longer answers replays of its idempotency key.
    intent.checkout_state = PaymentIntent.ABANDONED
    intent.idempotency_key = None
    intent.save(update_fields=["checkout_state", "idempotency_key", "updated_at"])


def _abandon(intent: PaymentIntent, bookings: list[Booking]):
    with transaction.atomic():
        for booking in Booking.objects.select_for_update().filter(
            pk__in=[booking.pk for booking in bookings],
            status=Booking.PENDING,
        ):
            booking.mark(Booking.CANCELLED)
        _release(intent)


def _start_payment(intent: PaymentIntent, bookings: list[Booking]) -> PaymentIntent:
    items = [
        {
            "id": str(booking.property_id),
            "name": booking.property.title,
            "price": booking.total_price,
            "quantity": 1,
        }
        for booking in bookings
    ]
    try:
        snap = gateway.create_transaction(
            order_id=intent.order_id,
            gross_amount=intent.amount,
            customer=_customer_details(intent.user),
            items=items,
        )
    except Exception as exc:
        logger.error(
            "Payment creation failed for order %s (user %s, bookings %s); releasing bookings",
            intent.order_id,
            intent.user_id,
            [booking.id for booking in bookings],
        )
        _abandon(intent, bookings)
        if isinstance(exc, PaymentGatewayError):
            raise
        raise PaymentGatewayError() from exc

    intent.snap_token = snap.token
    intent.snap_redirect_url = snap.redirect_url
    intent.save(update_fields=["snap_token", "snap_redirect_url", "updated_at"])
    logger.info("Payment %s started for user %s covering bookings %s", intent.order_id, intent.user_id, [b.id for b in bookings])
    return intent


def checkout(user, *, idempotency_key: str | None = None) -> PaymentIntent:
    """Turn the user's cart into pending bookings plus one payment intent."""
    replay = _find_replay(user, idempotency_key)
    if replay is not None:
        return replay

    cart = get_cart(user)
    if not cart.items:
        raise ConflictError("Your cart is empty")
    unavailable = [line.item.id for line in cart.items if not line.is_available]
    if unavailable:
        raise ConflictError(
            "Some items in your cart are no longer available",
            details={"unavailable_item_ids": unavailable},
        )

    stays = [
        Stay(line.item.property_id, line.item.start_date, line.item.end_date, line.item.guests)
        for line in cart.items
    ]
    try:
        with transaction.atomic():
            bookings = reserve_bookings(user, stays)
            intent = _create_intent(user, bookings, idempotency_key)
    except IntegrityError:
        # A concurrent request with the same key committed first.
        replay = _find_replay(user, idempotency_key)
        if replay is not None:
            return replay
        logger.exception("Could not record payment intent for user %s", user.id)
        raise ConflictError("Checkout could not be completed. Please retry.") from None

    return _start_payment(intent, bookings)


def initiate_payment(user, booking: Booking) -> PaymentIntent:
    """Pay for a single pending booking the user already holds."""
    with transaction.atomic():
        booking = Booking.objects.select_for_update().select_related("property").get(pk=booking.pk, user=user)
        if booking.status != Booking.PENDING:
            raise ConflictError("Only pending bookings can be paid")
        if booking.payment_intents.filter(checkout_state=PaymentIntent.AWAITING_PAYMENT).exists():
            raise ConflictError("This booking already has a payment in progress")
        intent = _create_intent(user, [booking])

    return _start_payment(intent, [booking])


def reap_abandoned_checkouts(older_than: timedelta | None = None) -> int:
    """
    Release bookings held by checkouts that never got paid.

    Intents still ``awaiting_payment`` with a ``pending`` gateway status past
    the TTL become ``abandoned`` and their pending bookings are cancelled.
    """
    if older_than is None:
        older_than = timedelta(minutes=settings.CHECKOUT_PAYMENT_TTL_MINUTES)
    cutoff = timezone.now() - older_than

    stale_ids = list(
        PaymentIntent.objects.filter(
            checkout_state=PaymentIntent.AWAITING_PAYMENT,
            status=PaymentIntent.PENDING,
            created_at__lt=cutoff,
        ).values_list("pk", flat=True)
    )
    reaped = 0
    for intent_id in stale_ids:
        with transaction.atomic():
            intent = PaymentIntent.objects.select_for_update().get(pk=intent_id)
            # A webhook may have landed since the scan.
            if intent.checkout_state != PaymentIntent.AWAITING_PAYMENT or intent.status != PaymentIntent.PENDING:
                continue
            for booking in intent.bookings.select_for_update().filter(status=Booking.PENDING):
                booking.mark(Booking.CANCELLED)
            _release(intent)
        reaped += 1
        logger.info("Abandoned stale checkout %s", intent.order_id)
    return reaped
