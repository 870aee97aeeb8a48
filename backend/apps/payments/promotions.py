"""
Promo usage tracking.

``validate`` is a read-only preview. ``redeem`` increments ``uses_count`` by
exactly one with a conditional UPDATE that re-checks the active flag, expiry
and cap in the same statement, so concurrent redemptions cannot overshoot
``max_uses``.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.db.models import F, Q
from django.utils import timezone

from backend.core.exceptions import PromoCodeExhausted, PromoCodeExpired, PromoCodeInvalid

from .models import PromoCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoPreview:
    code: str
    discount_amount: Decimal
    final_price: Decimal


def normalize_code(code):
    return (code or "").strip().upper()


class PromoUsageTracker:

    def lookup(self, code):
        """Return the active promo for ``code`` or raise PromoCodeInvalid."""
        code = normalize_code(code)
        if not code:
            raise PromoCodeInvalid()
        promo = PromoCode.objects.filter(code=code, is_active=True).first()
        if promo is None:
            raise PromoCodeInvalid()
        return promo

    def check_usable(self, promo, now=None):
        if not promo.is_active:
            raise PromoCodeInvalid()
        if promo.is_expired(now):
            raise PromoCodeExpired()
        if promo.is_exhausted:
            raise PromoCodeExhausted()

    def validate(self, code, cart_total):
        """Preview the discount for ``cart_total`` without consuming a use."""
        promo = self.lookup(code)
        self.check_usable(promo)
        total = Decimal(str(cart_total))
        discount = promo.calculate_discount(total)
        return PromoPreview(code=promo.code, discount_amount=discount, final_price=total - discount)

    def redeem(self, code):
        """Consume one use of ``code``; raises the same errors as ``validate``."""
        code = normalize_code(code)
        now = timezone.now()
        try:
            with transaction.atomic():
                updated = self._conditional_increment(code, now)
        except DatabaseError:
            # The direct UPDATE can be refused by row-level security; the
            # locked path enforces the same guards.
            logger.warning("Conditional promo increment refused for %s; using locked update", code)
            updated = self._locked_increment(code, now)

        if not updated:
            # Re-read to report why the guard did not match.
            promo = self.lookup(code)
            self.check_usable(promo, now)
            raise PromoCodeExhausted()
        logger.info("Promo code %s redeemed", code)

    @staticmethod
    def _redeemable(now):
        return (
            Q(is_active=True)
            & (Q(expires_at__isnull=True) | Q(expires_at__gt=now))
            & (Q(max_uses__isnull=True) | Q(uses_count__lt=F("max_uses")))
        )

    def _conditional_increment(self, code, now):
        return PromoCode.objects.filter(self._redeemable(now), code=code).update(
            uses_count=F("uses_count") + 1,
            updated_at=now,
        )

    def _locked_increment(self, code, now):
        with transaction.atomic():
            promo = PromoCode.objects.select_for_update().filter(code=code).first()
            if promo is None or not promo.is_active or promo.is_expired(now) or promo.is_exhausted:
                return 0
            promo.uses_count = F("uses_count") + 1
            promo.save(update_fields=["uses_count", "updated_at"])
            return 1
