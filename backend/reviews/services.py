from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction

from bookings.models import Booking
from core.exceptions import AuthorizationError, ConflictError, NotFoundError
from properties.services import get_property

from .models import Review

logger = logging.getLogger(__name__)

RATING_VALUES = (1, 2, 3, 4, 5)


def check_review_eligibility(user, property_id) -> bool:
    """Only guests with a completed stay at the property may review it."""
    stayed = Booking.objects.filter(
        user=user,
        property_id=property_id,
        status=Booking.COMPLETED,
    ).exists()
    if not stayed:
        raise AuthorizationError("You can only review properties where you have completed a stay")
    return True


def create_review(user, property_id, rating: int, comment: str = "") -> Review:
    property_obj = get_property(property_id, active_only=False)
    check_review_eligibility(user, property_obj.id)
    if Review.objects.filter(user=user, property=property_obj).exists():
        raise ConflictError("You have already reviewed this property")

    try:
        with transaction.atomic():
            review = Review.objects.create(
                user=user,
                property=property_obj,
                rating=rating,
                comment=comment or "",
            )
    except IntegrityError:
        # A concurrent submission won the unique constraint.
        raise ConflictError("You have already reviewed this property") from None

    logger.info("Review %s created by user %s for property %s", review.id, user.id, property_obj.id)
    return review


def _get_review(review_id) -> Review:
    try:
        return Review.objects.select_related("user", "property").get(pk=review_id)
    except (Review.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Review") from None


def update_review(user, review_id, rating: int | None = None, comment: str | None = None) -> Review:
    review = _get_review(review_id)
    if review.user_id != user.id:
        raise AuthorizationError("You can only update your own reviews")

    update_fields = ["updated_at"]
    if rating is not None:
        review.rating = rating
        update_fields.append("rating")
    if comment is not None:
        review.comment = comment
        update_fields.append("comment")
    review.save(update_fields=update_fields)
    return review


def delete_review(user, review_id) -> None:
    review = _get_review(review_id)
    if review.user_id != user.id and not user.is_admin:
        raise AuthorizationError("You can only delete your own reviews")
    review.delete()


def get_property_reviews(property_id):
    return Review.objects.filter(property_id=property_id).select_related("user").order_by("-created_at", "-id")


def calculate_property_rating(property_id) -> dict:
    """Average (one decimal), count and 1-5 star distribution of a property's reviews."""
    ratings = list(Review.objects.filter(property_id=property_id).values_list("rating", flat=True))
    distribution = {value: 0 for value in RATING_VALUES}
    for value in ratings:
        distribution[value] += 1

    if not ratings:
        return {"average": 0.0, "count": 0, "distribution": distribution}

    average = (Decimal(sum(ratings)) / len(ratings)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return {"average": float(average), "count": len(ratings), "distribution": distribution}
