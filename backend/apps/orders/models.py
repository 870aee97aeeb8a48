"""
Orders models for the license store.
"""
import secrets
import time
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from backend.apps.products.models import Plan


def generate_order_number():
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


class Order(models.Model):
    """
    A purchase of one license key. Manual orders wait ``pending`` for an
    admin; wallet and trial orders are created ``completed``.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        REJECTED = "rejected", _("Rejected")

    class PaymentMethod(models.TextChoices):
        MANUAL = "manual", _("Manual upload")
        WALLET = "wallet", _("Wallet")
        FREE_TRIAL = "free_trial", _("Free trial")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(
        _("order number"),
        max_length=40,
        unique=True,
        default=generate_order_number,
        editable=False
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="orders"
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="orders"
    )
    plan = models.CharField(_("plan"), max_length=20, choices=Plan.choices)

    # Price snapshot taken when the order was placed
    currency = models.CharField(_("currency"), max_length=3, default="USD")
    base_price = models.DecimalField(_("base price"), max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(_("discount"), max_digits=12, decimal_places=2, default=Decimal("0.00"))
    price = models.DecimalField(_("price charged"), max_digits=12, decimal_places=2, default=Decimal("0.00"))
    promo_code = models.CharField(_("promo code"), max_length=50, blank=True)

    payment_method = models.CharField(
        _("payment method"),
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.MANUAL
    )
    payment_channel = models.CharField(
        _("payment channel"),
        max_length=50,
        blank=True,
        help_text=_("Provider the customer paid through for manual orders.")
    )
    transaction_id = models.CharField(_("transaction reference"), max_length=255, blank=True)
    payment_proof_url = models.URLField(_("payment proof"), max_length=500, blank=True)

    status = models.CharField(
        _("status"),
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING
    )
    license_key = models.OneToOneField(
        "licenses.LicenseKey",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order"
    )
    completed_at = models.DateTimeField(_("completed at"), null=True, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("order")
        verbose_name_plural = _("orders")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
            models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(status="completed") | Q(license_key__isnull=False),
                name="orders_completed_has_license",
            ),
            models.CheckConstraint(condition=Q(price__gte=0), name="orders_price_non_negative"),
            models.UniqueConstraint(
                fields=["user", "product"],
                condition=Q(payment_method="free_trial"),
                name="orders_one_trial_per_user_product",
            ),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.status})"
