"""
Licenses models for the license store.

A key is sold for exactly one (product, plan) and moves
``unused -> assigned`` once; there is no path back.
"""
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from backend.apps.products.models import Plan


class LicenseKey(models.Model):
    """One single-use activation string in the inventory pool."""

    class Status(models.TextChoices):
        UNUSED = "unused", _("Unused")
        ASSIGNED = "assigned", _("Assigned")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="license_keys"
    )
    plan = models.CharField(_("plan"), max_length=20, choices=Plan.choices)
    key = models.CharField(_("license key"), max_length=255, unique=True)
    status = models.CharField(
        _("status"),
        max_length=10,
        choices=Status.choices,
        default=Status.UNUSED
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="license_keys"
    )
    assigned_at = models.DateTimeField(_("assigned at"), null=True, blank=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        verbose_name = _("license key")
        verbose_name_plural = _("license keys")
        ordering = ["-created_at"]
        indexes = [
            # Claim lookup: oldest unused key for a product/plan.
            models.Index(fields=["product", "plan", "status", "created_at"], name="licenses_claim_idx"),
            models.Index(fields=["assigned_to"], name="licenses_assigned_to_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(status="unused") | Q(assigned_at__isnull=False),
                name="licenses_assigned_has_timestamp",
            ),
        ]

    def __str__(self):
        return f"{self.masked_key} ({self.plan}, {self.status})"

    @property
    def masked_key(self):
        if len(self.key) <= 8:
            return "*" * len(self.key)
        return f"{self.key[:4]}...{self.key[-4:]}"
