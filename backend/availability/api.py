from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from availability.serializers import AvailabilityCheckSerializer
from availability.services.checker import check_availability
from properties.services import get_property


class AvailabilityCheckView(APIView):
    """Public check of whether a property is free for a date range."""

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = AvailabilityCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        property_obj = get_property(data["property_id"])
        result = check_availability(property_obj.id, data["start_date"], data["end_date"])
        return Response(result.as_dict())
