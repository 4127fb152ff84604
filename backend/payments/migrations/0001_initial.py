import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentIntent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.CharField(max_length=64, unique=True)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("currency", models.CharField(default="IDR", max_length=3)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("capture", "Capture"), ("settlement", "Settlement"), ("deny", "Deny"), ("cancel", "Cancel"), ("expire", "Expire"), ("refund", "Refund")], default="pending", max_length=12)),
                ("checkout_state", models.CharField(choices=[("awaiting_payment", "Awaiting payment"), ("paid", "Paid"), ("failed", "Failed"), ("abandoned", "Abandoned")], default="awaiting_payment", max_length=20)),
                ("idempotency_key", models.CharField(blank=True, max_length=255, null=True)),
                ("snap_token", models.CharField(blank=True, max_length=255)),
                ("snap_redirect_url", models.URLField(blank=True, max_length=500)),
                ("transaction_id", models.CharField(blank=True, max_length=100)),
                ("payment_type", models.CharField(blank=True, max_length=50)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("bookings", models.ManyToManyField(related_name="payment_intents", to="bookings.booking")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payment_intents", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["checkout_state", "status", "created_at"], name="payment_checkout_state_idx")],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("idempotency_key__isnull", False)), fields=("user", "idempotency_key"), name="payment_unique_idempotency_key"),
                ],
            },
        ),
    ]
