from rest_framework import serializers


class FavoriteCreateSerializer(serializers.Serializer):
    property_id = serializers.IntegerField(min_value=1)
