# FILE: /backend/apps/products/models.py
"""
Catalogue models for the license store.

A product carries one USD base price per paid plan plus optional
per-currency overrides. Trial plans are always free.
"""
import uuid
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Plan(models.TextChoices):
    """Duration tiers. A license key is only ever sold for its exact plan."""
    ONE_DAY = "1_day", _("1 day")
    SEVEN_DAYS = "7_days", _("7 days")
    THIRTY_DAYS = "30_days", _("30 days")
    LIFETIME = "lifetime", _("Lifetime")
    TRIAL_1_DAY = "trial_1_day", _("1 day trial")
    TRIAL_2_DAYS = "trial_2_days", _("2 day trial")
    TRIAL_3_DAYS = "trial_3_days", _("3 day trial")

    @classmethod
    def paid(cls):
        return [cls.ONE_DAY, cls.SEVEN_DAYS, cls.THIRTY_DAYS, cls.LIFETIME]

    @classmethod
    def trials(cls):
        return [cls.TRIAL_1_DAY, cls.TRIAL_2_DAYS, cls.TRIAL_3_DAYS]

    @classmethod
    def is_trial(cls, plan):
        return plan in cls.trials()

    @classmethod
    def for_trial_days(cls, days):
        suffix = "day" if days == 1 else "days"
        return cls(f"trial_{days}_{suffix}")


# Base price column for each paid plan
PLAN_PRICE_FIELDS = {
    Plan.ONE_DAY: "price_1_day",
    Plan.SEVEN_DAYS: "price_7_days",
    Plan.THIRTY_DAYS: "price_30_days",
    Plan.LIFETIME: "price_lifetime",
}


class Product(models.Model):
    """A piece of software sold as license keys."""

    TRIAL_DAY_CHOICES = [(1, _("1 day")), (2, _("2 days")), (3, _("3 days"))]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_("name"), max_length=200)
    description = models.TextField(_("description"), blank=True)
    image_url = models.URLField(_("image URL"), max_length=500, blank=True)
    download_link = models.URLField(_("download link"), max_length=500, blank=True)
    tutorial_video_link = models.URLField(_("tutorial video link"), max_length=500, blank=True)
    activation_process = models.TextField(_("activation process"), blank=True)

    # USD base prices per paid plan
    price_1_day = models.DecimalField(_("1 day price"), max_digits=10, decimal_places=2, default=Decimal("0.00"))
    price_7_days = models.DecimalField(_("7 days price"), max_digits=10, decimal_places=2, default=Decimal("0.00"))
    price_30_days = models.DecimalField(_("30 days price"), max_digits=10, decimal_places=2, default=Decimal("0.00"))
    price_lifetime = models.DecimalField(_("lifetime price"), max_digits=10, decimal_places=2, default=Decimal("0.00"))

    currency_prices = models.JSONField(
        _("currency price overrides"),
        default=dict,
        blank=True,
        help_text=_('e.g. {"EUR": {"7_days": "9.00"}}; missing or zero entries fall back to USD.')
    )

    trial_enabled = models.BooleanField(_("trial enabled"), default=False)
    trial_days = models.PositiveSmallIntegerField(_("trial days"), choices=TRIAL_DAY_CHOICES, default=1)

    is_active = models.BooleanField(_("active"), default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products_created"
    )
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("product")
        verbose_name_plural = _("products")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "-created_at"], name="products_active_created_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def trial_plan(self):
        """Plan identifier a trial claim for this product is fulfilled from."""
        if not self.trial_enabled:
            return None
        return Plan.for_trial_days(self.trial_days).value

    def base_price(self, plan):
        """USD base price for ``plan``; trial plans are free."""
        if Plan.is_trial(plan):
            return Decimal("0.00")
        return getattr(self, PLAN_PRICE_FIELDS[plan])

    def currency_price(self, currency, plan):
        """Configured override for (currency, plan), or None."""
        table = (self.currency_prices or {}).get((currency or "").upper()) or {}
        raw = table.get(plan)
        if raw in (None, ""):
            return None
        try:
            return Decimal(str(raw))
        except InvalidOperation:
            return None
