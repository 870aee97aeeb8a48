import uuid

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
            name="LedgerEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("kind", models.CharField(choices=[("credit", "Credit"), ("debit", "Debit")], max_length=10, verbose_name="kind")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="amount (USD)")),
                ("balance_after", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="balance after (USD)")),
                ("reference", models.CharField(blank=True, max_length=100, verbose_name="reference")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "ledger entry",
                "verbose_name_plural": "ledger entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="payments_ledger_user_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TopUpRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="amount")),
                ("currency", models.CharField(default="USD", max_length=3, verbose_name="currency")),
                ("payment_method", models.CharField(max_length=50, verbose_name="payment method")),
                ("transaction_id", models.CharField(blank=True, max_length=255, verbose_name="transaction reference")),
                ("proof_url", models.URLField(blank=True, max_length=500, verbose_name="payment proof")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=10,
                        verbose_name="status",
                    ),
                ),
                (
                    "credited_amount",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="credited amount (USD)"),
                ),
                ("review_notes", models.TextField(blank=True, verbose_name="review notes")),
                ("processed_at", models.DateTimeField(blank=True, null=True, verbose_name="processed at")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_topups",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="topup_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "top-up request",
                "verbose_name_plural": "top-up requests",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="payments_topup_user_idx"),
                    models.Index(fields=["status", "created_at"], name="payments_topup_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="payments_topup_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PromoCode",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="code")),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percent", "Percent"), ("fixed", "Fixed amount")],
                        default="percent",
                        max_length=10,
                        verbose_name="discount type",
                    ),
                ),
                ("value", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="value")),
                (
                    "max_uses",
                    models.PositiveIntegerField(blank=True, help_text="Leave empty for unlimited uses", null=True, verbose_name="max uses"),
                ),
                ("uses_count", models.PositiveIntegerField(default=0, verbose_name="uses count")),
                ("expires_at", models.DateTimeField(blank=True, null=True, verbose_name="expires at")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "promo code",
                "verbose_name_plural": "promo codes",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("max_uses__isnull", True), ("uses_count__lte", models.F("max_uses")), _connector="OR"),
                        name="payments_promo_uses_within_cap",
                    ),
                ],
            },
        ),
    ]
