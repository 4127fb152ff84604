from django.contrib.auth.models import AbstractUser
from django.db import models

NOTIFICATION_PREFERENCE_DEFAULTS = {
    "email_booking_confirmation": True,
    "email_booking_reminder": True,
    "email_marketing": False,
    "push_enabled": True,
}


def default_notification_preferences():
    return dict(NOTIFICATION_PREFERENCE_DEFAULTS)


class User(AbstractUser):
    ROLE_USER = "user"
    ROLE_ADMIN = "admin"
    ROLES = [
        (ROLE_USER, "User"),
        (ROLE_ADMIN, "Admin"),
    ]

    full_name = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    role = models.CharField(max_length=10, choices=ROLES, default=ROLE_USER)
    notification_preferences = models.JSONField(default=default_notification_preferences, blank=True)

    def __str__(self):
        return self.full_name or self.email or self.username

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == self.ROLE_ADMIN

    @property
    def display_name(self) -> str:
        return self.full_name or f"{self.first_name} {self.last_name}".strip() or self.email

    def wants_notification(self, key: str) -> bool:
        return bool((self.notification_preferences or {}).get(key, NOTIFICATION_PREFERENCE_DEFAULTS[key]))
