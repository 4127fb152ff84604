from rest_framework import serializers


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["end_date"] <= attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "End date must be after start date."})
        return attrs


class AvailabilityCheckSerializer(DateRangeSerializer):
    property_id = serializers.IntegerField(min_value=1)
