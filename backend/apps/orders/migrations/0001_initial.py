import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import backend.apps.orders.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("licenses", "0001_initial"),
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "order_number",
                    models.CharField(
                        default=backend.apps.orders.models.generate_order_number,
                        editable=False,
                        max_length=40,
                        unique=True,
                        verbose_name="order number",
                    ),
                ),
                (
                    "plan",
                    models.CharField(
                        choices=[
                            ("1_day", "1 day"),
                            ("7_days", "7 days"),
                            ("30_days", "30 days"),
                            ("lifetime", "Lifetime"),
                            ("trial_1_day", "1 day trial"),
                            ("trial_2_days", "2 day trial"),
                            ("trial_3_days", "3 day trial"),
                        ],
                        max_length=20,
                        verbose_name="plan",
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3, verbose_name="currency")),
                ("base_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, verbose_name="base price")),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, verbose_name="discount")),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, verbose_name="price charged")),
                ("promo_code", models.CharField(blank=True, max_length=50, verbose_name="promo code")),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("manual", "Manual upload"), ("wallet", "Wallet"), ("free_trial", "Free trial")],
                        default="manual",
                        max_length=20,
                        verbose_name="payment method",
                    ),
                ),
                (
                    "payment_channel",
                    models.CharField(
                        blank=True,
                        help_text="Provider the customer paid through for manual orders.",
                        max_length=50,
                        verbose_name="payment channel",
                    ),
                ),
                ("transaction_id", models.CharField(blank=True, max_length=255, verbose_name="transaction reference")),
                ("payment_proof_url", models.URLField(blank=True, max_length=500, verbose_name="payment proof")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=10,
                        verbose_name="status",
                    ),
                ),
                ("completed_at", models.DateTimeField(blank=True, null=True, verbose_name="completed at")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "license_key",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order",
                        to="licenses.licensekey",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="products.product",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "order",
                "verbose_name_plural": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
                    models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(models.Q(("status", "completed"), _negated=True), ("license_key__isnull", False), _connector="OR"),
                        name="orders_completed_has_license",
                    ),
                    models.CheckConstraint(condition=models.Q(("price__gte", 0)), name="orders_price_non_negative"),
                    models.UniqueConstraint(
                        condition=models.Q(("payment_method", "free_trial")),
                        fields=("user", "product"),
                        name="orders_one_trial_per_user_product",
                    ),
                ],
            },
        ),
    ]
