from datetime import timedelta

from django.core.management.base import BaseCommand

from payments.services.checkout import reap_abandoned_checkouts


class Command(BaseCommand):
    help = "Abandon unpaid checkouts older than the payment TTL and release their bookings."

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes",
            type=int,
            default=None,
            help="Override CHECKOUT_PAYMENT_TTL_MINUTES.",
        )

    def handle(self, *args, **options):
        older_than = timedelta(minutes=options["minutes"]) if options["minutes"] is not None else None
        count = reap_abandoned_checkouts(older_than)
        self.stdout.write(self.style.SUCCESS(f"Abandoned {count} checkout(s)."))
