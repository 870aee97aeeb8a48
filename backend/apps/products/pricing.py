"""
Price Resolver.

Turns (product, plan, display currency, promo code) into a ``PriceQuote``.
Quoting never consumes a promo use; ``redeem`` does, and it re-checks the
code against the same snapshot the quote was computed from.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from rest_framework.exceptions import ValidationError

from backend.apps.payments.ledger import to_money
from backend.apps.payments.promotions import PromoUsageTracker
from backend.core.exceptions import PlanUnavailable

from .models import Plan

logger = logging.getLogger(__name__)

BASE_CURRENCY = "USD"


@dataclass(frozen=True)
class PriceQuote:
    product_id: object
    plan: str
    currency: str
    base_price: Decimal
    discount: Decimal
    final_price: Decimal
    promo_code: str = ""

    def as_dict(self):
        return {
            'product_id': str(self.product_id),
            'plan': self.plan,
            'currency': self.currency,
            'base_price': self.base_price,
            'discount_amount': self.discount,
            'final_price': self.final_price,
            'promo_code': self.promo_code or None,
        }


class PriceResolver:

    def __init__(self, promo_tracker=None):
        self.promo_tracker = promo_tracker or PromoUsageTracker()

    def resolve_base_price(self, product, plan, currency=BASE_CURRENCY):
        """
        Return ``(price, currency)`` for a paid plan. A non-zero override for
        the display currency wins; otherwise the USD base price applies.
        """
        if plan not in Plan.paid():
            raise ValidationError({'plan': 'Invalid Plan'})

        currency = (currency or BASE_CURRENCY).upper()
        if currency != BASE_CURRENCY:
            override = product.currency_price(currency, plan)
            if override is not None and override > 0:
                return to_money(override), currency

        price = product.base_price(plan)
        if price is None or price <= 0:
            raise PlanUnavailable(f"The {Plan(plan).label} plan is not available for {product.name}.")
        return to_money(price), BASE_CURRENCY

    def quote(self, product, plan, currency=BASE_CURRENCY, promo_code=None):
        base_price, quoted_currency = self.resolve_base_price(product, plan, currency)
        discount = Decimal("0.00")
        code = ""
        if promo_code:
            preview = self.promo_tracker.validate(promo_code, base_price)
            discount = preview.discount_amount
            code = preview.code
        return PriceQuote(
            product_id=product.pk,
            plan=plan,
            currency=quoted_currency,
            base_price=base_price,
            discount=discount,
            final_price=base_price - discount,
            promo_code=code,
        )

    def redeem(self, quote):
        """Consume the promo use a quote was priced with, if any."""
        if quote.promo_code:
            self.promo_tracker.redeem(quote.promo_code)
