"""Search filters for the public property listing."""

import django_filters
from django.db import connection
from django.db.models import Avg, F

from availability.services.checker import overlapping_bookings

from .models import Property

SORT_CHOICES = (
    ("price_asc", "Price: low to high"),
    ("price_desc", "Price: high to low"),
    ("rating", "Rating"),
    ("newest", "Newest"),
)


class PropertyFilterSet(django_filters.FilterSet):
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    min_price = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="lte")
    # CSV of amenity names; a property must offer all of them.
    amenities = django_filters.CharFilter(method="filter_amenities")
    check_in = django_filters.DateFilter(method="filter_dates")
    check_out = django_filters.DateFilter(method="filter_dates")
    sort_by = django_filters.ChoiceFilter(choices=SORT_CHOICES, method="filter_sort")

    class Meta:
        model = Property
        fields = ["location", "guests", "min_price", "max_price"]

    def filter_amenities(self, queryset, name, value):
        wanted = [item.strip() for item in value.split(",") if item.strip()]
        if not wanted:
            return queryset
        if connection.features.supports_json_field_contains:
            for amenity in wanted:
                queryset = queryset.filter(amenities__contains=[amenity])
            return queryset
        matching = [
            pk
            for pk, amenities in queryset.values_list("pk", "amenities")
            if set(wanted).issubset(amenities or [])
        ]
        return queryset.filter(pk__in=matching)

    def filter_dates(self, queryset, name, value):
        # Applied once both ends are known; the second call is a no-op.
        check_in = self.form.cleaned_data.get("check_in")
        check_out = self.form.cleaned_data.get("check_out")
        if name != "check_out" or not check_in or not check_out or check_out <= check_in:
            return queryset
        busy = overlapping_bookings(check_in, check_out).values("property_id")
        return queryset.exclude(pk__in=busy)

    def filter_sort(self, queryset, name, value):
        if value == "price_asc":
            return queryset.order_by("price_per_night", "id")
        if value == "price_desc":
            return queryset.order_by("-price_per_night", "id")
        if value == "rating":
            return queryset.annotate(average_rating=Avg("reviews__rating")).order_by(F("average_rating").desc(nulls_last=True), "-created_at")
        return queryset.order_by("-created_at", "-id")
