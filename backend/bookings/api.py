from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from bookings.models import Booking
from bookings.serializers import (
    AdminBookingSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
)
from bookings.services import bookings as booking_services
from core.pagination import PageLimitPagination
from payments.serializers import PaymentIntentSerializer
from payments.services.checkout import initiate_payment


class BookingPagination(PageLimitPagination):
    results_key = "bookings"


def _filter_status(queryset, request):
    requested = request.query_params.get("status")
    if requested in dict(Booking.STATUSES):
        queryset = queryset.filter(status=requested)
    return queryset


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = BookingSerializer
    pagination_class = BookingPagination

    def get_queryset(self):
        queryset = Booking.objects.filter(user=self.request.user).select_related("property")
        return _filter_status(queryset, self.request).order_by("-created_at", "-id")

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_services.create_booking(request.user, **serializer.validated_data)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        booking = booking_services.cancel_booking(request.user, pk)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        booking = booking_services.get_user_booking(request.user, pk)
        intent = initiate_payment(request.user, booking)
        return Response(PaymentIntentSerializer(intent).data, status=status.HTTP_201_CREATED)


class AdminBookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = AdminBookingSerializer
    permission_classes = [IsAdminRole]
    pagination_class = BookingPagination

    def get_queryset(self):
        queryset = Booking.objects.select_related("property", "user")
        return _filter_status(queryset, self.request).order_by("-created_at", "-id")

    def partial_update(self, request, pk=None):
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_services.update_booking_status(pk, serializer.validated_data["status"])
        return Response(AdminBookingSerializer(booking).data)
