from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("property", "user", "start_date", "end_date", "guests", "total_price", "status")
    list_filter = ("status",)
    search_fields = ("property__title", "user__email")
    date_hierarchy = "start_date"
    readonly_fields = ("nightly_rate", "service_fee", "total_price", "cancelled_at", "created_at", "updated_at")
