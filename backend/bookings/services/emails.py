from __future__ import annotations

from django.conf import settings
from django.core.mail import send_mail

from bookings.models import Booking


def _format_from_email() -> str:
    default_from = settings.DEFAULT_FROM_EMAIL
    email_addr = default_from
    if '<' in default_from and default_from.endswith('>'):
        email_addr = default_from.split('<', 1)[1].rstrip('>')
    return f"Staybook <{email_addr}>"


def send_booking_confirmation_email(*, booking: Booking):
    guest = booking.user
    if not guest.email:
        return

    property_obj = booking.property
    subject = f"{property_obj.title} booking confirmed"
    bookings_url = f"{settings.FRONTEND_URL.rstrip('/')}/bookings"
    body_lines = [
        f"Hi {guest.display_name},",
        "",
        f"Your stay at {property_obj.title} in {property_obj.location} is confirmed.",
        f"Check-in: {booking.start_date:%B %d, %Y}. Check-out: {booking.end_date:%B %d, %Y}.",
        f"Guests: {booking.guests}. Total paid: {settings.BOOKING_CURRENCY} {booking.total_price:,.2f}.",
        "",
        f"Manage your bookings: {bookings_url}",
        "",
        "The Staybook Team",
    ]
    send_mail(
        subject,
        "\n".join(body_lines),
        _format_from_email(),
        [guest.email],
        fail_silently=False,
    )
