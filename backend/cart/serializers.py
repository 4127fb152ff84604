from rest_framework import serializers

from availability.serializers import DateRangeSerializer
from properties.serializers import PropertySnapshotSerializer


class CartItemWriteSerializer(DateRangeSerializer):
    property_id = serializers.IntegerField(min_value=1)
    guests = serializers.IntegerField(min_value=1, default=1)


class CartItemUpdateSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    guests = serializers.IntegerField(min_value=1, required=False)


class PricingSerializer(serializers.Serializer):
    nights = serializers.IntegerField()
    nightly_rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)
    service_fee = serializers.DecimalField(max_digits=14, decimal_places=2)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class CartLineSerializer(serializers.Serializer):
    id = serializers.IntegerField(source="item.id")
    property_id = serializers.IntegerField(source="item.property_id")
    start_date = serializers.DateField(source="item.start_date")
    end_date = serializers.DateField(source="item.end_date")
    guests = serializers.IntegerField(source="item.guests")
    created_at = serializers.DateTimeField(source="item.created_at")
    property = PropertySnapshotSerializer(source="item.property")
    pricing = PricingSerializer()
    is_available = serializers.BooleanField()


class CartSummarySerializer(serializers.Serializer):
    item_count = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_service_fee = serializers.DecimalField(max_digits=14, decimal_places=2)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    all_available = serializers.BooleanField()


class CartSerializer(serializers.Serializer):
    items = CartLineSerializer(many=True)
    summary = CartSummarySerializer()
