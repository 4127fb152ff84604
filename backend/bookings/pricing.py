from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.conf import settings

SERVICE_FEE_RATE = Decimal("0.10")
CENTS = Decimal("0.01")
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class BookingPrice:
    nights: int
    nightly_rate: Decimal
    subtotal: Decimal
    service_fee: Decimal
    total: Decimal


def to_money(value) -> Decimal:
    """Coerce ints, floats, strings and Decimals to a two-place Decimal."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def service_fee_rate() -> Decimal:
    return Decimal(str(getattr(settings, "BOOKING_SERVICE_FEE_RATE", SERVICE_FEE_RATE)))


def calculate_nights(start: date | datetime, end: date | datetime) -> int:
    """
    Whole nights between check-in and check-out.

    Plain dates give the calendar-day difference; datetimes round a partial
    trailing day up to a full night.
    """
    if isinstance(start, datetime) and isinstance(end, datetime):
        return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    return (end - start).days


def calculate_booking_price(
    nightly_rate,
    start: date | datetime,
    end: date | datetime,
    *,
    fee_rate: Optional[Decimal] = None,
) -> BookingPrice:
    """
    Price a stay: ``nights × nightly_rate`` plus a service fee rounded to cents.

    Callers must pass ``end > start``; anything else is a programming error.
    """
    nights = calculate_nights(start, end)
    if nights < 1:
        raise ValueError("A stay must last at least one night.")

    rate = to_money(nightly_rate)
    subtotal = rate * nights
    fee = to_money(subtotal * (fee_rate if fee_rate is not None else service_fee_rate()))
    return BookingPrice(
        nights=nights,
        nightly_rate=rate,
        subtotal=subtotal,
        service_fee=fee,
        total=subtotal + fee,
    )
