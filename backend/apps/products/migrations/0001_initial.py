import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                ("image_url", models.URLField(blank=True, max_length=500, verbose_name="image URL")),
                ("download_link", models.URLField(blank=True, max_length=500, verbose_name="download link")),
                ("tutorial_video_link", models.URLField(blank=True, max_length=500, verbose_name="tutorial video link")),
                ("activation_process", models.TextField(blank=True, verbose_name="activation process")),
                ("price_1_day", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10, verbose_name="1 day price")),
                ("price_7_days", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10, verbose_name="7 days price")),
                ("price_30_days", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10, verbose_name="30 days price")),
                ("price_lifetime", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10, verbose_name="lifetime price")),
                (
                    "currency_prices",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text='e.g. {"EUR": {"7_days": "9.00"}}; missing or zero entries fall back to USD.',
                        verbose_name="currency price overrides",
                    ),
                ),
                ("trial_enabled", models.BooleanField(default=False, verbose_name="trial enabled")),
                (
                    "trial_days",
                    models.PositiveSmallIntegerField(
                        choices=[(1, "1 day"), (2, "2 days"), (3, "3 days")], default=1, verbose_name="trial days"
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "product",
                "verbose_name_plural": "products",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "-created_at"], name="products_active_created_idx"),
                ],
            },
        ),
    ]
