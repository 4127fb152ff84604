from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "full_name", "role", "is_active", "date_joined")
    list_filter = ("role", "is_active", "is_superuser")
    search_fields = ("email", "full_name")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Profile", {"fields": ("full_name", "phone", "role")}),
    )
