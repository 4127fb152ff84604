from rest_framework import serializers

from availability.serializers import DateRangeSerializer
from bookings.models import Booking
from properties.serializers import PropertySnapshotSerializer


class BookingSerializer(serializers.ModelSerializer):
    property = PropertySnapshotSerializer(read_only=True)
    nights = serializers.IntegerField(source="night_count", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "property_id",
            "property",
            "start_date",
            "end_date",
            "nights",
            "guests",
            "nightly_rate",
            "service_fee",
            "total_price",
            "status",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminBookingSerializer(BookingSerializer):
    user_id = serializers.IntegerField(read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["user_id", "user_email"]
        read_only_fields = fields


class BookingCreateSerializer(DateRangeSerializer):
    property_id = serializers.IntegerField(min_value=1)
    guests = serializers.IntegerField(min_value=1, default=1)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.STATUSES)
