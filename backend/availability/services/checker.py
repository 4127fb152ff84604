from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from bookings.models import Booking
from core.exceptions import ValidationError


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def as_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass
class AvailabilityResult:
    available: bool
    conflicting_dates: list[DateRange] = field(default_factory=list)

    def as_dict(self) -> dict:
        data = {"available": self.available}
        if not self.available:
            data["conflicting_dates"] = [span.as_dict() for span in self.conflicting_dates]
        return data


def date_ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Half-open ``[start, end)`` overlap: a check-out day may be the next check-in day."""
    return start1 < end2 and start2 < end1


def blocking_bookings(property_id, *, after: date | None = None, exclude_booking_ids: Iterable[int] = ()):
    """Bookings that occupy the property's calendar (anything not cancelled)."""
    queryset = Booking.objects.filter(
        property_id=property_id,
        status__in=Booking.BLOCKING_STATUSES,
    )
    if after is not None:
        queryset = queryset.filter(end_date__gt=after)
    exclude_booking_ids = list(exclude_booking_ids)
    if exclude_booking_ids:
        queryset = queryset.exclude(id__in=exclude_booking_ids)
    return queryset.order_by("start_date", "id")


def overlapping_bookings(start_date: date, end_date: date):
    """Blocking bookings across all properties that intersect ``[start_date, end_date)``."""
    return Booking.objects.filter(
        status__in=Booking.BLOCKING_STATUSES,
        start_date__lt=end_date,
        end_date__gt=start_date,
    )


def check_availability(
    property_id,
    start_date: date,
    end_date: date,
    *,
    exclude_booking_ids: Iterable[int] = (),
) -> AvailabilityResult:
    """Report whether ``[start_date, end_date)`` is free, listing the ranges that collide if not."""
    if end_date <= start_date:
        raise ValidationError(
            "End date must be after start date",
            details={"end_date": ["End date must be after start date"]},
        )

    conflicts = [
        DateRange(booking.start_date, booking.end_date)
        for booking in blocking_bookings(
            property_id,
            after=start_date,
            exclude_booking_ids=exclude_booking_ids,
        ).only("start_date", "end_date")
        if date_ranges_overlap(start_date, end_date, booking.start_date, booking.end_date)
    ]
    if conflicts:
        return AvailabilityResult(available=False, conflicting_dates=conflicts)
    return AvailabilityResult(available=True)
