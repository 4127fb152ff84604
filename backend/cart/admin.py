from django.contrib import admin

from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("user", "property", "start_date", "end_date", "guests", "created_at")
    search_fields = ("user__email", "property__title")
