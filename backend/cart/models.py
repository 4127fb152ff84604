from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q


class CartItem(models.Model):
    """A stay the user intends to book; priced and re-checked whenever the cart is read."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="cart_items")
    property = models.ForeignKey("properties.Property", on_delete=models.CASCADE, related_name="cart_items")
    start_date = models.DateField()
    end_date = models.DateField()
    guests = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="cart_item_end_after_start",
            ),
            models.CheckConstraint(
                condition=Q(guests__gte=1),
                name="cart_item_guests_positive",
            ),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.property_id} {self.start_date:%Y-%m-%d} → {self.end_date:%Y-%m-%d}"
