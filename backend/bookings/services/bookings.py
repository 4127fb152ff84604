"""
Booking creation and lifecycle.

All booking inserts go through :func:`reserve_bookings`, which serializes
concurrent reservations per property by locking the property rows before the
availability re-check. On PostgreSQL an exclusion constraint backs the same
rule at the storage level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from django.db import IntegrityError, transaction
from django.utils import timezone

from availability.services.checker import check_availability, date_ranges_overlap
from bookings.models import Booking
from bookings.pricing import calculate_booking_price
from core.exceptions import ConflictError, NotFoundError, ValidationError
from notifications.services import notify_booking_cancelled
from properties.models import Property

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Property is not available for the selected dates"


@dataclass(frozen=True)
class Stay:
    property_id: int
    start_date: date
    end_date: date
    guests: int = 1


def _lock_properties(property_ids: Iterable[int]) -> dict[int, Property]:
    # Lock in id order so concurrent checkouts over the same properties cannot deadlock.
    ids = sorted(set(property_ids))
    locked = {prop.id: prop for prop in Property.objects.select_for_update().filter(pk__in=ids).order_by("id")}
    for property_id in ids:
        prop = locked.get(property_id)
        if prop is None or not prop.is_active:
            raise NotFoundError("Property")
    return locked


def _conflict(stay: Stay, conflicting_dates: list[dict]) -> ConflictError:
    return ConflictError(
        UNAVAILABLE_MESSAGE,
        details={"property_id": stay.property_id, "conflicting_dates": conflicting_dates},
    )


def reserve_bookings(user, stays: list[Stay]) -> list[Booking]:
    """
    Create one ``pending`` booking per stay, or none at all.

    Every stay is re-checked against persisted bookings and against the other
    stays of the same batch, then re-priced from the property's current
    nightly rate. Raises ``ConflictError`` when any stay is no longer free.
    """
    if not stays:
        raise ValidationError("At least one stay is required")

    try:
        with transaction.atomic():
            properties = _lock_properties(stay.property_id for stay in stays)
            accepted: list[Stay] = []
            bookings: list[Booking] = []
            for stay in stays:
                if stay.end_date <= stay.start_date:
                    raise ValidationError(
                        "Check-out date must be after check-in date",
                        details={"end_date": ["Check-out date must be after check-in date"]},
                    )
                prop = properties[stay.property_id]
                if stay.guests < 1 or stay.guests > prop.max_guests:
                    message = f"Guest count exceeds property maximum of {prop.max_guests}"
                    raise ValidationError(message, details={"guests": [message]})

                availability = check_availability(prop.id, stay.start_date, stay.end_date)
                if not availability.available:
                    raise _conflict(stay, [span.as_dict() for span in availability.conflicting_dates])
                clashes = [
                    {"start": other.start_date.isoformat(), "end": other.end_date.isoformat()}
                    for other in accepted
                    if other.property_id == stay.property_id
                    and date_ranges_overlap(stay.start_date, stay.end_date, other.start_date, other.end_date)
                ]
                if clashes:
                    raise _conflict(stay, clashes)

                price = calculate_booking_price(prop.price_per_night, stay.start_date, stay.end_date)
                bookings.append(
                    Booking.objects.create(
                        user=user,
                        property=prop,
                        start_date=stay.start_date,
                        end_date=stay.end_date,
                        guests=stay.guests,
                        nightly_rate=price.nightly_rate,
                        service_fee=price.service_fee,
                        total_price=price.total,
                        status=Booking.PENDING,
                    )
                )
                accepted.append(stay)
    except IntegrityError as exc:
        logger.warning("Overlapping booking rejected by the database for user %s: %s", user.id, exc)
        raise ConflictError(UNAVAILABLE_MESSAGE) from None

    logger.info("Reserved bookings %s for user %s", [booking.id for booking in bookings], user.id)
    return bookings


def create_booking(user, property_id, start_date: date, end_date: date, guests: int = 1) -> Booking:
    if start_date < timezone.localdate():
        raise ValidationError(
            "Check-in date must be in the future",
            details={"start_date": ["Check-in date must be in the future"]},
        )
    [booking] = reserve_bookings(user, [Stay(property_id, start_date, end_date, guests)])
    return booking


def get_user_booking(user, booking_id, *, for_update: bool = False) -> Booking:
    queryset = Booking.objects.select_related("property", "user")
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=booking_id, user=user)
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Booking") from None


def _ensure_cancellable(booking: Booking):
    if booking.status == Booking.CANCELLED:
        raise ConflictError("Booking is already cancelled")
    if booking.status == Booking.COMPLETED:
        raise ConflictError("Completed bookings cannot be cancelled")


def _send_cancellation(booking: Booking):
    try:
        notify_booking_cancelled(booking)
    except Exception:
        logger.exception("Failed to send cancellation notifications for booking %s", booking.id)


def cancel_booking(user, booking_id) -> Booking:
    """Owner cancellation of a pending or confirmed booking."""
    with transaction.atomic():
        booking = get_user_booking(user, booking_id, for_update=True)
        _ensure_cancellable(booking)
        booking.mark(Booking.CANCELLED)

    logger.info("Booking %s cancelled by user %s", booking.id, user.id)
    _send_cancellation(booking)
    return booking


def update_booking_status(booking_id, status: str) -> Booking:
    """Admin override of a booking's status; reinstating a cancelled stay re-checks the calendar."""
    if status not in dict(Booking.STATUSES):
        raise ValidationError(f"Unknown booking status: {status}", details={"status": ["Invalid status."]})

    try:
        with transaction.atomic():
            try:
                booking = Booking.objects.select_for_update().select_related("property", "user").get(pk=booking_id)
            except (Booking.DoesNotExist, ValueError, TypeError):
                raise NotFoundError("Booking") from None

            previous = booking.status
            if previous == status:
                return booking
            if previous == Booking.CANCELLED:
                # Serialize with concurrent reservations of the same property.
                Property.objects.select_for_update().get(pk=booking.property_id)
                availability = check_availability(
                    booking.property_id,
                    booking.start_date,
                    booking.end_date,
                    exclude_booking_ids=[booking.id],
                )
                if not availability.available:
                    raise ConflictError(
                        UNAVAILABLE_MESSAGE,
                        details={"conflicting_dates": [span.as_dict() for span in availability.conflicting_dates]},
                    )
            booking.mark(status)
    except IntegrityError:
        raise ConflictError(UNAVAILABLE_MESSAGE) from None

    logger.info("Booking %s moved from %s to %s by admin", booking.id, previous, status)
    if status == Booking.CANCELLED:
        _send_cancellation(booking)
    return booking


def complete_past_bookings(today: date | None = None) -> int:
    """Mark confirmed bookings whose check-out day has arrived as completed."""
    today = today or timezone.localdate()
    count = Booking.objects.filter(status=Booking.CONFIRMED, end_date__lte=today).update(
        status=Booking.COMPLETED,
        updated_at=timezone.now(),
    )
    if count:
        logger.info("Marked %s past bookings as completed", count)
    return count
