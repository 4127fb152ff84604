from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from bookings.models import Booking
from notifications.models import Notification
from notifications.services import notify_booking_reminder


class Command(BaseCommand):
    help = "Send an in-app reminder for confirmed stays that start tomorrow."

    def add_arguments(self, parser):
        parser.add_argument("--days-ahead", type=int, default=1)

    def handle(self, *args, **options):
        start = timezone.localdate() + timedelta(days=options["days_ahead"])
        bookings = Booking.objects.filter(status=Booking.CONFIRMED, start_date=start).select_related("property")
        sent = 0
        for booking in bookings:
            already_sent = Notification.objects.filter(
                user_id=booking.user_id,
                type=Notification.BOOKING_REMINDER,
                data__booking_id=booking.id,
            ).exists()
            if already_sent:
                continue
            notify_booking_reminder(booking)
            sent += 1
        self.stdout.write(self.style.SUCCESS(f"Sent {sent} reminder(s) for stays starting {start:%Y-%m-%d}."))
