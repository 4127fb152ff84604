from django.contrib import admin

from .models import Favorite


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ("property", "user", "created_at")
    search_fields = ("property__title", "user__email")
