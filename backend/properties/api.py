from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminRoleOrReadOnly
from availability.serializers import DateRangeSerializer
from availability.services.checker import check_availability
from core.pagination import PageLimitPagination
from reviews.serializers import PropertyRatingSerializer, ReviewSerializer
from reviews.services import calculate_property_rating, get_property_reviews

from .filters import PropertyFilterSet
from .models import Property
from .serializers import PropertySerializer


class PropertyViewSet(viewsets.ModelViewSet):
    """Public browse/search of listings; admins manage the catalogue."""

    serializer_class = PropertySerializer
    permission_classes = [IsAdminRoleOrReadOnly]
    filterset_class = PropertyFilterSet
    pagination_class = PageLimitPagination

    def get_queryset(self):
        queryset = Property.objects.all().order_by("-created_at", "-id")
        user = self.request.user
        if user.is_authenticated and user.is_admin:
            return queryset
        return queryset.filter(is_active=True)

    def perform_destroy(self, instance):
        # Listings with booking history are retired instead of deleted.
        if instance.bookings.exists():
            instance.is_active = False
            instance.save(update_fields=["is_active", "updated_at"])
            return
        instance.delete()

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        property_obj = self.get_object()
        serializer = DateRangeSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        result = check_availability(
            property_obj.id,
            serializer.validated_data["start_date"],
            serializer.validated_data["end_date"],
        )
        return Response(result.as_dict())

    @action(detail=True, methods=["get"])
    def reviews(self, request, pk=None):
        property_obj = self.get_object()
        serializer = ReviewSerializer(get_property_reviews(property_obj.id), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=["get"])
    def rating(self, request, pk=None):
        property_obj = self.get_object()
        return Response(PropertyRatingSerializer(calculate_property_rating(property_obj.id)).data)
