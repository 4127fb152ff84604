from django.conf import settings
from django.db import models


class Notification(models.Model):
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    PAYMENT_SUCCESS = "payment_success"
    PAYMENT_FAILED = "payment_failed"
    BOOKING_REMINDER = "booking_reminder"
    TYPES = [
        (BOOKING_CONFIRMED, "Booking confirmed"),
        (BOOKING_CANCELLED, "Booking cancelled"),
        (PAYMENT_SUCCESS, "Payment success"),
        (PAYMENT_FAILED, "Payment failed"),
        (BOOKING_REMINDER, "Booking reminder"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    type = models.CharField(max_length=32, choices=TYPES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "read"], name="notification_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id}"
