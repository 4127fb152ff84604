from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class Booking(models.Model):
    """A persisted reservation of one property for a half-open date range."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    STATUSES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
        (COMPLETED, "Completed"),
    ]
    # Statuses that occupy the property's calendar.
    BLOCKING_STATUSES = (PENDING, CONFIRMED, COMPLETED)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookings")
    property = models.ForeignKey("properties.Property", on_delete=models.PROTECT, related_name="bookings")
    start_date = models.DateField()
    end_date = models.DateField()
    guests = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    nightly_rate = models.DecimalField(max_digits=12, decimal_places=2)
    service_fee = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["property", "status", "start_date"], name="booking_property_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="booking_end_after_start",
            ),
        ]

    def __str__(self):
        return f"{self.property.title}: {self.start_date:%Y-%m-%d} → {self.end_date:%Y-%m-%d} ({self.status})"

    def night_count(self) -> int:
        return (self.end_date - self.start_date).days

    def mark(self, status: str):
        """Move to ``status`` and persist only the touched columns."""
        self.status = status
        update_fields = ["status", "updated_at"]
        if status == self.CANCELLED:
            self.cancelled_at = timezone.now()
            update_fields.append("cancelled_at")
        self.save(update_fields=update_fields)
