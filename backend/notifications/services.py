"""
In-app notification sink.

Each ``notify_*`` helper writes one :class:`Notification` row per recipient.
Callers on the payment path treat these as best-effort side effects.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q

from bookings.services.emails import send_booking_confirmation_email
from core.exceptions import NotFoundError

from .models import Notification


def _format_amount(amount) -> str:
    return f"{settings.BOOKING_CURRENCY} {Decimal(str(amount)):,.2f}"


def create_notification(user_id, type: str, title: str, message: str, data: dict | None = None) -> Notification:
    return Notification.objects.create(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        data=data or {},
    )


def _booking_data(booking) -> dict:
    return {
        "booking_id": booking.id,
        "property_id": booking.property_id,
        "property_title": booking.property.title,
        "start_date": booking.start_date.isoformat(),
        "end_date": booking.end_date.isoformat(),
    }


def notify_booking_confirmed(booking, *, send_email: bool = True) -> Notification:
    notification = create_notification(
        booking.user_id,
        Notification.BOOKING_CONFIRMED,
        "Booking Confirmed",
        f"Your booking for {booking.property.title} from {booking.start_date:%Y-%m-%d} "
        f"to {booking.end_date:%Y-%m-%d} has been confirmed.",
        _booking_data(booking),
    )
    if send_email and booking.user.wants_notification("email_booking_confirmation"):
        send_booking_confirmation_email(booking=booking)
    return notification


def notify_booking_cancelled(booking, *, notify_admins: bool = True) -> list[Notification]:
    """Tell the guest and, unless disabled, every admin that ``booking`` was cancelled."""
    data = _booking_data(booking)
    dates = f"from {booking.start_date:%Y-%m-%d} to {booking.end_date:%Y-%m-%d}"
    notifications = [
        create_notification(
            booking.user_id,
            Notification.BOOKING_CANCELLED,
            "Booking Cancelled",
            f"Your booking for {booking.property.title} {dates} has been cancelled.",
            data,
        )
    ]
    if not notify_admins:
        return notifications

    User = get_user_model()
    admins = (
        User.objects.filter(Q(role=User.ROLE_ADMIN) | Q(is_superuser=True), is_active=True)
        .exclude(pk=booking.user_id)
        .values_list("pk", flat=True)
    )
    for admin_id in admins:
        notifications.append(
            create_notification(
                admin_id,
                Notification.BOOKING_CANCELLED,
                "Booking Cancelled",
                f"A booking for {booking.property.title} {dates} has been cancelled.",
                {**data, "guest_id": booking.user_id},
            )
        )
    return notifications


def notify_booking_reminder(booking) -> Notification:
    return create_notification(
        booking.user_id,
        Notification.BOOKING_REMINDER,
        "Booking Reminder",
        f"Your stay at {booking.property.title} in {booking.property.location} starts "
        f"on {booking.start_date:%Y-%m-%d}. Have a great trip!",
        _booking_data(booking),
    )


def notify_payment_success(user_id, booking_id, amount, property_title: str) -> Notification:
    return create_notification(
        user_id,
        Notification.PAYMENT_SUCCESS,
        "Payment Successful",
        f"Your payment of {_format_amount(amount)} for {property_title} has been processed successfully.",
        {"booking_id": booking_id, "amount": str(amount), "property_title": property_title},
    )


def notify_payment_failed(user_id, booking_id, amount, property_title: str) -> Notification:
    return create_notification(
        user_id,
        Notification.PAYMENT_FAILED,
        "Payment Failed",
        f"Your payment of {_format_amount(amount)} for {property_title} could not be processed. Please try again.",
        {"booking_id": booking_id, "amount": str(amount), "property_title": property_title},
    )


def mark_as_read(user, notification_id) -> Notification:
    try:
        notification = Notification.objects.get(pk=notification_id, user=user)
    except (Notification.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Notification") from None
    if not notification.read:
        notification.read = True
        notification.save(update_fields=["read"])
    return notification


def mark_all_as_read(user) -> int:
    return Notification.objects.filter(user=user, read=False).update(read=True)


def unread_count(user) -> int:
    return Notification.objects.filter(user=user, read=False).count()
