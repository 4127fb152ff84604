from django.contrib import admin

from .models import PaymentIntent


@admin.register(PaymentIntent)
class PaymentIntentAdmin(admin.ModelAdmin):
    list_display = ("order_id", "user", "amount", "currency", "status", "checkout_state", "created_at")
    list_filter = ("status", "checkout_state")
    search_fields = ("order_id", "transaction_id", "user__email")
    filter_horizontal = ("bookings",)
    readonly_fields = ("snap_token", "snap_redirect_url", "transaction_id", "payment_type", "paid_at", "created_at", "updated_at")
