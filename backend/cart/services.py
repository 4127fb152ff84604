"""
The per-user cart: items are stored bare and priced and re-checked on every read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from django.utils import timezone

from availability.services.checker import AvailabilityResult, check_availability
from bookings.pricing import BookingPrice, calculate_booking_price
from core.exceptions import ConflictError, NotFoundError, ValidationError
from properties.models import Property
from properties.services import get_property

from .models import CartItem

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Property is not available for the selected dates"


@dataclass
class CartLine:
    item: CartItem
    pricing: BookingPrice
    availability: AvailabilityResult

    @property
    def is_available(self) -> bool:
        return self.availability.available


@dataclass
class CartSummary:
    item_count: int = 0
    subtotal: Decimal = Decimal("0.00")
    total_service_fee: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    all_available: bool = True


@dataclass
class Cart:
    items: list[CartLine] = field(default_factory=list)
    summary: CartSummary = field(default_factory=CartSummary)


def _summarize(lines: list[CartLine]) -> CartSummary:
    summary = CartSummary(item_count=len(lines))
    for line in lines:
        summary.subtotal += line.pricing.subtotal
        summary.total_service_fee += line.pricing.service_fee
        summary.total += line.pricing.total
        summary.all_available = summary.all_available and line.is_available
    return summary


def get_cart(user) -> Cart:
    """Price every item from its property's current rate and report whether each is still bookable."""
    items = CartItem.objects.filter(user=user).select_related("property").order_by("-created_at", "-id")
    lines = []
    for item in items:
        pricing = calculate_booking_price(item.property.price_per_night, item.start_date, item.end_date)
        if item.property.is_active:
            availability = check_availability(item.property_id, item.start_date, item.end_date)
        else:
            availability = AvailabilityResult(available=False)
        lines.append(CartLine(item=item, pricing=pricing, availability=availability))
    return Cart(items=lines, summary=_summarize(lines))


def _validate_stay(property_obj: Property, start_date: date, end_date: date, guests: int):
    if start_date < timezone.localdate():
        raise ValidationError(
            "Check-in date must be in the future",
            details={"start_date": ["Check-in date must be in the future"]},
        )
    if end_date <= start_date:
        raise ValidationError(
            "Check-out date must be after check-in date",
            details={"end_date": ["Check-out date must be after check-in date"]},
        )
    if guests < 1:
        raise ValidationError("At least one guest is required", details={"guests": ["At least one guest is required"]})
    if guests > property_obj.max_guests:
        message = f"Guest count exceeds property maximum of {property_obj.max_guests}"
        raise ValidationError(message, details={"guests": [message]})

    availability = check_availability(property_obj.id, start_date, end_date)
    if not availability.available:
        raise ConflictError(
            UNAVAILABLE_MESSAGE,
            details={"conflicting_dates": [span.as_dict() for span in availability.conflicting_dates]},
        )


def add_to_cart(user, property_id, start_date: date, end_date: date, guests: int) -> CartItem:
    property_obj = get_property(property_id)
    _validate_stay(property_obj, start_date, end_date, guests)
    item = CartItem.objects.create(
        user=user,
        property=property_obj,
        start_date=start_date,
        end_date=end_date,
        guests=guests,
    )
    logger.info("User %s added property %s to cart (item %s)", user.id, property_obj.id, item.id)
    return item


def _get_item(user, item_id) -> CartItem:
    try:
        return CartItem.objects.select_related("property").get(pk=item_id, user=user)
    except (CartItem.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Cart item") from None


def update_cart_item(
    user,
    item_id,
    start_date: date | None = None,
    end_date: date | None = None,
    guests: int | None = None,
) -> CartItem:
    """Merge the given fields over the stored item and re-validate it like a fresh add."""
    item = _get_item(user, item_id)
    if not item.property.is_active:
        raise NotFoundError("Property")

    item.start_date = start_date if start_date is not None else item.start_date
    item.end_date = end_date if end_date is not None else item.end_date
    item.guests = guests if guests is not None else item.guests
    _validate_stay(item.property, item.start_date, item.end_date, item.guests)
    item.save(update_fields=["start_date", "end_date", "guests", "updated_at"])
    return item


def remove_from_cart(user, item_id) -> None:
    deleted, _ = CartItem.objects.filter(pk=item_id, user=user).delete()
    if not deleted:
        raise NotFoundError("Cart item")


def clear_cart(user) -> int:
    deleted, _ = CartItem.objects.filter(user=user).delete()
    return deleted
