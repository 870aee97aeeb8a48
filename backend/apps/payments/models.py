"""
Payments models for the license store: wallet audit trail, balance top-up
requests and promo codes.
"""
import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

TWO_PLACES = Decimal("0.01")


# ----------------------------------------------------------------------
# LEDGER ENTRY – append-only audit of every balance movement
# ----------------------------------------------------------------------

class LedgerEntry(models.Model):
    """
    One row per wallet credit or debit, written in the same transaction
    as the balance update it describes.
    """

    class Kind(models.TextChoices):
        CREDIT = "credit", _("Credit")
        DEBIT = "debit", _("Debit")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ledger_entries"
    )
    kind = models.CharField(_("kind"), max_length=10, choices=Kind.choices)
    amount = models.DecimalField(_("amount (USD)"), max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(_("balance after (USD)"), max_digits=12, decimal_places=2)
    reference = models.CharField(_("reference"), max_length=100, blank=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        verbose_name = _("ledger entry")
        verbose_name_plural = _("ledger entries")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="payments_ledger_user_idx"),
        ]

    def __str__(self):
        return f"{self.kind} {self.amount} USD for {self.user_id}"


# ----------------------------------------------------------------------
# TOP-UP REQUEST – manual balance top-ups reviewed by an admin
# ----------------------------------------------------------------------

class TopUpRequest(models.Model):
    """A user's request to add funds, credited once on approval."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="topup_requests"
    )
    amount = models.DecimalField(_("amount"), max_digits=12, decimal_places=2)
    currency = models.CharField(_("currency"), max_length=3, default="USD")
    payment_method = models.CharField(_("payment method"), max_length=50)
    transaction_id = models.CharField(_("transaction reference"), max_length=255, blank=True)
    proof_url = models.URLField(_("payment proof"), max_length=500, blank=True)

    status = models.CharField(
        _("status"),
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    credited_amount = models.DecimalField(
        _("credited amount (USD)"),
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_topups"
    )
    review_notes = models.TextField(_("review notes"), blank=True)
    processed_at = models.DateTimeField(_("processed at"), null=True, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("top-up request")
        verbose_name_plural = _("top-up requests")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="payments_topup_user_idx"),
            models.Index(fields=["status", "created_at"], name="payments_topup_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name="payments_topup_amount_positive"),
        ]

    def __str__(self):
        return f"Top-up {self.amount} {self.currency} ({self.status})"


# ----------------------------------------------------------------------
# PROMO CODE – usage cap enforced by conditional increments
# ----------------------------------------------------------------------

class PromoCode(models.Model):
    """Discount code with an optional expiry and usage cap."""

    class DiscountType(models.TextChoices):
        PERCENT = "percent", _("Percent")
        FIXED = "fixed", _("Fixed amount")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(_("code"), max_length=50, unique=True)
    discount_type = models.CharField(
        _("discount type"),
        max_length=10,
        choices=DiscountType.choices,
        default=DiscountType.PERCENT
    )
    value = models.DecimalField(_("value"), max_digits=10, decimal_places=2)
    max_uses = models.PositiveIntegerField(
        _("max uses"),
        null=True,
        blank=True,
        help_text=_("Leave empty for unlimited uses")
    )
    uses_count = models.PositiveIntegerField(_("uses count"), default=0)
    expires_at = models.DateTimeField(_("expires at"), null=True, blank=True)
    is_active = models.BooleanField(_("active"), default=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("promo code")
        verbose_name_plural = _("promo codes")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(max_uses__isnull=True) | Q(uses_count__lte=F("max_uses")),
                name="payments_promo_uses_within_cap",
            ),
        ]

    def __str__(self):
        return f"Promo: {self.code}"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def is_expired(self, now=None):
        return self.expires_at is not None and self.expires_at <= (now or timezone.now())

    @property
    def is_exhausted(self):
        return self.max_uses is not None and self.uses_count >= self.max_uses

    def calculate_discount(self, amount):
        """Discount for ``amount``, never more than the amount itself."""
        amount = Decimal(amount)
        if self.discount_type == self.DiscountType.PERCENT:
            discount = (amount * self.value / Decimal(100)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        else:
            discount = self.value
        return max(Decimal("0.00"), min(discount, amount))
