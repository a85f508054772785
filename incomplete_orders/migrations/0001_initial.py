import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="IncompleteOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("session_id", models.CharField(db_index=True, max_length=64)),
                ("full_name", models.CharField(blank=True, max_length=200, null=True)),
                ("phone", models.CharField(blank=True, db_index=True, max_length=32, null=True)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("address", models.TextField(blank=True, null=True)),
                ("shipping_location", models.CharField(blank=True, max_length=120, null=True)),
                ("payment_method", models.CharField(blank=True, max_length=64, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("cart_items", models.JSONField(blank=True, default=list)),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("shipping_fee", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("source", models.CharField(choices=[("checkout", "Checkout"), ("quick_buy", "Quick buy")], default="checkout", max_length=16)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("converted", "Converted"), ("hidden", "Hidden")], db_index=True, default="pending", max_length=16)),
                ("converted_order_id", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("last_updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "verbose_name": "Incomplete order",
                "verbose_name_plural": "Incomplete orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["session_id", "status"], name="incomplete_session_status_idx"),
                    models.Index(fields=["phone", "status"], name="incomplete_phone_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "pending")),
                        fields=("session_id",),
                        name="incomplete_order_one_pending_per_session",
                    ),
                ],
            },
        ),
    ]
