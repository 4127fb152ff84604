from rest_framework import serializers

from .models import Property


class PropertySerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "id",
            "title",
            "description",
            "location",
            "latitude",
            "longitude",
            "price_per_night",
            "max_guests",
            "bedrooms",
            "beds",
            "bathrooms",
            "amenities",
            "image_urls",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_amenities(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Amenities must be a list of strings.")
        return value

    def validate_image_urls(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Image URLs must be a list of strings.")
        return value


class PropertySnapshotSerializer(serializers.ModelSerializer):
    """Compact property fields embedded in cart items and bookings."""

    class Meta:
        model = Property
        fields = ["id", "title", "location", "image_urls", "price_per_night", "max_guests"]
        read_only_fields = fields
