"""
Support models: account credential reset requests for purchased products.
"""
import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from backend.core.encryption import EncryptionManager


class CredentialResetRequest(models.Model):
    """
    A customer asks support to reset the account they use with a product.
    The submitted password is stored Fernet-encrypted.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reset_requests"
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="reset_requests"
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="reset_requests"
    )
    username = models.CharField(_("account username"), max_length=255)
    encrypted_password = models.TextField(_("encrypted password"))

    status = models.CharField(
        _("status"),
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    admin_response = models.TextField(_("admin response"), blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_reset_requests"
    )
    processed_at = models.DateTimeField(_("processed at"), null=True, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("credential reset request")
        verbose_name_plural = _("credential reset requests")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="support_reset_user_idx"),
        ]

    def __str__(self):
        return f"Reset for {self.username} ({self.status})"

    def set_password(self, raw_password):
        self.encrypted_password = EncryptionManager().encrypt(raw_password)

    def get_password(self):
        return EncryptionManager().decrypt(self.encrypted_password)
