from django.core.management.base import BaseCommand

from bookings.services.bookings import complete_past_bookings


class Command(BaseCommand):
    help = "Mark confirmed bookings whose check-out date has passed as completed."

    def handle(self, *args, **options):
        count = complete_past_bookings()
        self.stdout.write(self.style.SUCCESS(f"Completed {count} booking(s)."))
