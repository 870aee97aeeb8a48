import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LicenseKey",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
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
                ("key", models.CharField(max_length=255, unique=True, verbose_name="license key")),
                (
                    "status",
                    models.CharField(
                        choices=[("unused", "Unused"), ("assigned", "Assigned")],
                        default="unused",
                        max_length=10,
                        verbose_name="status",
                    ),
                ),
                ("assigned_at", models.DateTimeField(blank=True, null=True, verbose_name="assigned at")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="license_keys",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="license_keys",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "verbose_name": "license key",
                "verbose_name_plural": "license keys",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["product", "plan", "status", "created_at"], name="licenses_claim_idx"),
                    models.Index(fields=["assigned_to"], name="licenses_assigned_to_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("status", "unused"), ("assigned_at__isnull", False), _connector="OR"),
                        name="licenses_assigned_has_timestamp",
                    ),
                ],
            },
        ),
    ]
