from django.conf import settings
from rest_framework import serializers

from payments.models import PaymentIntent


class PaymentIntentSerializer(serializers.ModelSerializer):
    booking_ids = serializers.PrimaryKeyRelatedField(source="bookings", many=True, read_only=True)
    client_key = serializers.SerializerMethodField()

    class Meta:
        model = PaymentIntent
        fields = [
            "id",
            "order_id",
            "booking_ids",
            "amount",
            "currency",
            "status",
            "checkout_state",
            "snap_token",
            "snap_redirect_url",
            "client_key",
            "transaction_id",
            "payment_type",
            "paid_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_client_key(self, obj):
        return settings.MIDTRANS_CLIENT_KEY


class CheckoutSerializer(serializers.Serializer):
    idempotency_key = serializers.CharField(max_length=255, required=False, allow_blank=True)


class PaymentNotificationSerializer(serializers.Serializer):
    """Fields of a Midtrans HTTP notification that reconciliation relies on."""

    order_id = serializers.CharField(max_length=64)
    status_code = serializers.CharField(max_length=10)
    gross_amount = serializers.CharField(max_length=32)
    signature_key = serializers.CharField()
    transaction_status = serializers.CharField(max_length=32)
    transaction_id = serializers.CharField(max_length=100)
    payment_type = serializers.CharField(max_length=50)
    fraud_status = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
