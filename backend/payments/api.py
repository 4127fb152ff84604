import logging

from rest_framework import mixins, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.models import PaymentIntent
from payments.serializers import CheckoutSerializer, PaymentIntentSerializer
from payments.services.checkout import checkout
from payments.services.reconcile import handle_payment_notification

logger = logging.getLogger(__name__)


class CheckoutView(APIView):
    def post(self, request, *args, **kwargs):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        key = serializer.validated_data.get("idempotency_key") or request.headers.get("Idempotency-Key")
        intent = checkout(request.user, idempotency_key=key or None)
        return Response(PaymentIntentSerializer(intent).data, status=status.HTTP_201_CREATED)


class PaymentIntentViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = PaymentIntentSerializer

    def get_queryset(self):
        return PaymentIntent.objects.filter(user=self.request.user).prefetch_related("bookings")


class MidtransNotificationView(APIView):
    """Receive Midtrans HTTP notifications."""

    permission_classes: list = []
    authentication_classes: list = []

    def get(self, request, *args, **kwargs):
        return Response({"status": "ok", "message": "Midtrans notification endpoint"})

    def post(self, request, *args, **kwargs):
        result = handle_payment_notification(request.data)
        logger.info("Processed Midtrans notification for order %s", result.order_id)
        return Response({"status": "success"})
