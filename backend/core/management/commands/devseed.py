from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from bookings.models import Booking
from bookings.pricing import calculate_booking_price
from properties.models import Property
from reviews.models import Review


SEED_PASSWORD = "Staybook123!"
ADMIN_EMAIL = "admin@staybook.test"
ADMIN_PASSWORD = "AdminStaybook123!"

SAMPLE_PROPERTIES = [
    {
        "title": "Terrace Villa with Rice Field View",
        "location": "Ubud, Bali",
        "price_per_night": Decimal("1250000.00"),
        "max_guests": 4,
        "bedrooms": 2,
        "beds": 2,
        "bathrooms": 2,
        "amenities": ["pool", "wifi", "kitchen", "breakfast"],
    },
    {
        "title": "Cliffside Ocean Suite",
        "location": "Uluwatu, Bali",
        "price_per_night": Decimal("2400000.00"),
        "max_guests": 2,
        "bedrooms": 1,
        "beds": 1,
        "bathrooms": 1,
        "amenities": ["wifi", "air_conditioning", "ocean_view"],
    },
    {
        "title": "Desert Dome Glamping",
        "location": "Sumba, East Nusa Tenggara",
        "price_per_night": Decimal("850000.00"),
        "max_guests": 3,
        "bedrooms": 1,
        "beds": 2,
        "bathrooms": 1,
        "amenities": ["breakfast", "parking"],
    },
    {
        "title": "Old Town Loft",
        "location": "Yogyakarta",
        "price_per_night": Decimal("600000.00"),
        "max_guests": 2,
        "bedrooms": 1,
        "beds": 1,
        "bathrooms": 1,
        "amenities": ["wifi", "kitchen", "workspace"],
    },
]


class Command(BaseCommand):
    help = "Populate the local development database with sample data."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Creating users"))
            admin_user = self._ensure_user(ADMIN_EMAIL, "Admin User", role=User.ROLE_ADMIN, password=ADMIN_PASSWORD)
            admin_user.is_staff = True
            admin_user.save(update_fields=["is_staff"])
            guest = self._ensure_user("tara@staybook.test", "Tara Traveller")
            self._ensure_user("budi@staybook.test", "Budi Santoso")

            self.stdout.write(self.style.MIGRATE_HEADING("Creating properties"))
            properties = [self._ensure_property(data) for data in SAMPLE_PROPERTIES]

            self.stdout.write(self.style.MIGRATE_HEADING("Creating bookings and reviews"))
            today = timezone.localdate()
            past_stay = self._ensure_booking(
                guest,
                properties[0],
                today - timedelta(days=20),
                today - timedelta(days=17),
                Booking.COMPLETED,
            )
            Review.objects.get_or_create(
                user=guest,
                property=past_stay.property,
                defaults={"rating": 5, "comment": "Waking up to the rice terraces was unforgettable."},
            )
            self._ensure_booking(
                guest,
                properties[1],
                today + timedelta(days=30),
                today + timedelta(days=33),
                Booking.CONFIRMED,
            )

        self.stdout.write(self.style.SUCCESS("Development seed data created."))
        self.stdout.write(self.style.NOTICE(f"Sample login accounts use password: {SEED_PASSWORD}"))
        self.stdout.write(self.style.NOTICE(f"Admin {ADMIN_EMAIL} password: {ADMIN_PASSWORD}"))

    def _ensure_user(self, email: str, full_name: str, role: str = User.ROLE_USER, password: str = SEED_PASSWORD) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "full_name": full_name,
                "role": role,
            },
        )
        if created:
            user.set_password(password)
            user.save()
        else:
            fields_to_update = {}
            if user.full_name != full_name:
                fields_to_update["full_name"] = full_name
            if user.role != role:
                fields_to_update["role"] = role
            if fields_to_update:
                for attr, value in fields_to_update.items():
                    setattr(user, attr, value)
                user.save(update_fields=list(fields_to_update.keys()))
            if not user.has_usable_password():
                user.set_password(password)
                user.save(update_fields=["password"])
        return user

    def _ensure_property(self, data: dict) -> Property:
        defaults = {key: value for key, value in data.items() if key != "title"}
        defaults["description"] = f"Sample listing for {data['title']}."
        prop, created = Property.objects.get_or_create(title=data["title"], defaults=defaults)
        if created:
            self.stdout.write(self.style.NOTICE(f"Added {prop.title}"))
        return prop

    def _ensure_booking(self, user: User, prop: Property, start, end, status: str) -> Booking:
        existing = Booking.objects.filter(user=user, property=prop, start_date=start, end_date=end).first()
        if existing:
            return existing
        price = calculate_booking_price(prop.price_per_night, start, end)
        return Booking.objects.create(
            user=user,
            property=prop,
            start_date=start,
            end_date=end,
            guests=1,
            nightly_rate=price.nightly_rate,
            service_fee=price.service_fee,
            total_price=price.total,
            status=status,
        )
