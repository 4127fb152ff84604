from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import OuterRef, Subquery

from core.exceptions import ConflictError, NotFoundError
from properties.models import Property
from properties.services import get_property

from .models import Favorite

logger = logging.getLogger(__name__)


def add_to_favorites(user, property_id) -> Favorite:
    property_obj = get_property(property_id)
    if Favorite.objects.filter(user=user, property=property_obj).exists():
        raise ConflictError("Property is already in favorites")
    try:
        with transaction.atomic():
            favorite = Favorite.objects.create(user=user, property=property_obj)
    except IntegrityError:
        raise ConflictError("Property is already in favorites") from None
    logger.info("User %s saved property %s", user.id, property_obj.id)
    return favorite


def remove_from_favorites(user, property_id) -> None:
    try:
        deleted, _ = Favorite.objects.filter(user=user, property_id=property_id).delete()
    except (ValueError, TypeError):
        deleted = 0
    if not deleted:
        raise NotFoundError("Favorite")


def get_user_favorites(user):
    """Saved properties, most recently saved first."""
    saved_at = Favorite.objects.filter(user=user, property=OuterRef("pk")).values("created_at")
    return (
        Property.objects.filter(favorites__user=user)
        .annotate(favorited_at=Subquery(saved_at[:1]))
        .order_by("-favorited_at", "-id")
    )


def is_favorite(user, property_id) -> bool:
    if user is None or not user.is_authenticated:
        return False
    try:
        return Favorite.objects.filter(user=user, property_id=property_id).exists()
    except (ValueError, TypeError):
        return False
