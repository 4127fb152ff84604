from django.conf import settings
from django.db import models
from django.db.models import Q


class PaymentIntent(models.Model):
    """One gateway transaction paying for one or more bookings."""

    PENDING = "pending"
    CAPTURE = "capture"
    SETTLEMENT = "settlement"
    DENY = "deny"
    CANCEL = "cancel"
    EXPIRE = "expire"
    REFUND = "refund"
    STATUSES = [
        (PENDING, "Pending"),
        (CAPTURE, "Capture"),
        (SETTLEMENT, "Settlement"),
        (DENY, "Deny"),
        (CANCEL, "Cancel"),
        (EXPIRE, "Expire"),
        (REFUND, "Refund"),
    ]
    SUCCESS_STATUSES = (CAPTURE, SETTLEMENT)
    FAILURE_STATUSES = (DENY, CANCEL, EXPIRE)

    AWAITING_PAYMENT = "awaiting_payment"
    PAID = "paid"
    FAILED = "failed"
    ABANDONED = "abandoned"
    CHECKOUT_STATES = [
        (AWAITING_PAYMENT, "Awaiting payment"),
        (PAID, "Paid"),
        (FAILED, "Failed"),
        (ABANDONED, "Abandoned"),
    ]

    OUTCOME_SUCCESS = "success"
    OUTCOME_FAILURE = "failure"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payment_intents")
    bookings = models.ManyToManyField("bookings.Booking", related_name="payment_intents")
    order_id = models.CharField(max_length=64, unique=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3, default="IDR")
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    checkout_state = models.CharField(max_length=20, choices=CHECKOUT_STATES, default=AWAITING_PAYMENT)
    idempotency_key = models.CharField(max_length=255, null=True, blank=True)
    snap_token = models.CharField(max_length=255, blank=True)
    snap_redirect_url = models.URLField(max_length=500, blank=True)
    transaction_id = models.CharField(max_length=100, blank=True)
    payment_type = models.CharField(max_length=50, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["checkout_state", "status", "created_at"], name="payment_checkout_state_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "idempotency_key"],
                condition=Q(idempotency_key__isnull=False),
                name="payment_unique_idempotency_key",
            ),
        ]

    def __str__(self):
        return f"{self.order_id} ({self.status})"

    @classmethod
    def outcome_of(cls, status: str):
        if status in cls.SUCCESS_STATUSES:
            return cls.OUTCOME_SUCCESS
        if status in cls.FAILURE_STATUSES:
            return cls.OUTCOME_FAILURE
        return None
