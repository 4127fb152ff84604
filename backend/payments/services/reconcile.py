from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from bookings.models import Booking
from cart.services import clear_cart
from core.exceptions import AuthenticationError, NotFoundError, ValidationError
from notifications.services import notify_booking_confirmed, notify_payment_failed, notify_payment_success
from payments import gateway
from payments.models import PaymentIntent
from payments.serializers import PaymentNotificationSerializer

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    order_id: str
    previous_status: str
    status: str
    outcome: str | None = None
    side_effects_applied: bool = False
    booking_ids: list[int] = field(default_factory=list)


def _run_side_effect(description: str, func, *args, **kwargs):
    try:
        func(*args, **kwargs)
    except Exception:
        logger.exception("Payment side effect failed: %s", description)


def _property_titles(bookings: list[Booking]) -> str:
    return ", ".join(dict.fromkeys(booking.property.title for booking in bookings))


def _check_amount(intent: PaymentIntent, gross_amount: str):
    try:
        notified = Decimal(gross_amount)
    except InvalidOperation:
        notified = None
    if notified != intent.amount:
        logger.warning(
            "Notification for order %s reports gross_amount %s but %s was charged",
            intent.order_id,
            gross_amount,
            intent.amount,
        )


def _should_fire(checkout_state: str, outcome: str | None) -> bool:
    if outcome == PaymentIntent.OUTCOME_SUCCESS:
        return checkout_state != PaymentIntent.PAID
    if outcome == PaymentIntent.OUTCOME_FAILURE:
        return checkout_state in (PaymentIntent.AWAITING_PAYMENT, PaymentIntent.ABANDONED)
    return False


def handle_payment_notification(payload) -> ReconcileResult:
    """
    Apply a gateway notification to its payment intent and linked bookings.

    The intent always records the latest gateway status. Booking transitions
    and notifications are driven by ``checkout_state``: a success settles a
    checkout that is not yet ``paid``, a failure only ends one that is still
    open. Once a checkout is ``paid`` no later notification fires again.
    """
    serializer = PaymentNotificationSerializer(data=payload)
    if not serializer.is_valid():
        raise ValidationError("Invalid notification payload", details=serializer.errors)
    data = serializer.validated_data

    if not gateway.verify_signature(data["order_id"], data["status_code"], data["gross_amount"], data["signature_key"]):
        logger.warning("Invalid signature on payment notification for order %s", data["order_id"])
        raise AuthenticationError("Invalid signature")

    new_status = gateway.map_transaction_status(data["transaction_status"], data.get("fraud_status"))

    with transaction.atomic():
        try:
            intent = PaymentIntent.objects.select_for_update().select_related("user").get(order_id=data["order_id"])
        except PaymentIntent.DoesNotExist:
            raise NotFoundError("Payment") from None
        _check_amount(intent, data["gross_amount"])

        previous_status = intent.status
        outcome = PaymentIntent.outcome_of(new_status)
        fire = _should_fire(intent.checkout_state, outcome)

        intent.status = new_status
        intent.transaction_id = data["transaction_id"]
        intent.payment_type = data["payment_type"]
        update_fields = ["status", "transaction_id", "payment_type", "updated_at"]

        moved: list[Booking] = []
        if fire:
            pending = list(
                Booking.objects.select_for_update()
                .select_related("property", "user")
                .filter(payment_intents=intent, status=Booking.PENDING)
                .order_by("id")
            )
            target = Booking.CONFIRMED if outcome == PaymentIntent.OUTCOME_SUCCESS else Booking.CANCELLED
            for booking in pending:
                booking.mark(target)
                moved.append(booking)

            if outcome == PaymentIntent.OUTCOME_SUCCESS:
                intent.checkout_state = PaymentIntent.PAID
                intent.paid_at = timezone.now()
                update_fields += ["checkout_state", "paid_at"]
            else:
                intent.checkout_state = PaymentIntent.FAILED
                update_fields.append("checkout_state")
        intent.save(update_fields=update_fields)

    result = ReconcileResult(
        order_id=intent.order_id,
        previous_status=previous_status,
        status=new_status,
        outcome=outcome,
        side_effects_applied=fire,
        booking_ids=[booking.id for booking in moved],
    )
    logger.info(
        "Payment %s moved %s -> %s (bookings %s)",
        intent.order_id,
        previous_status,
        new_status,
        result.booking_ids,
    )
    if not fire:
        return result

    if outcome == PaymentIntent.OUTCOME_SUCCESS:
        total_linked = intent.bookings.count()
        if len(moved) < total_linked:
            logger.warning(
                "Order %s was paid but only %s of %s bookings were still pending; review for refund",
                intent.order_id,
                len(moved),
                total_linked,
            )
        for booking in moved:
            _run_side_effect(f"booking confirmed {booking.id}", notify_booking_confirmed, booking)
        if moved:
            _run_side_effect(
                f"payment success {intent.order_id}",
                notify_payment_success,
                intent.user_id,
                moved[0].id,
                intent.amount,
                _property_titles(moved),
            )
            _run_side_effect(f"clear cart for user {intent.user_id}", clear_cart, intent.user)
    else:
        linked = moved or list(intent.bookings.select_related("property").order_by("id"))
        _run_side_effect(
            f"payment failed {intent.order_id}",
            notify_payment_failed,
            intent.user_id,
            linked[0].id if linked else None,
            intent.amount,
            _property_titles(linked),
        )
    return result
