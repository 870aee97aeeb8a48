from decimal import Decimal

from django.test import TestCase
from rest_framework.exceptions import ValidationError

from backend.apps.payments.models import PromoCode
from backend.apps.products.models import Plan
from backend.apps.products.pricing import PriceResolver
from backend.core.exceptions import PlanUnavailable, PromoCodeExhausted
from tests.factories import ProductFactory, PromoCodeFactory


class PriceResolverTests(TestCase):

    def setUp(self):
        self.resolver = PriceResolver()
        self.product = ProductFactory(
            currency_prices={"GBP": {"7_days": "8.00", "30_days": "0"}},
        )

    def test_usd_base_price(self):
        quote = self.resolver.quote(self.product, Plan.SEVEN_DAYS)

        self.assertEqual(quote.currency, "USD")
        self.assertEqual(quote.base_price, Decimal("10.00"))
        self.assertEqual(quote.discount, Decimal("0.00"))
        self.assertEqual(quote.final_price, Decimal("10.00"))
        self.assertEqual(quote.promo_code, "")

    def test_currency_override_wins(self):
        quote = self.resolver.quote(self.product, Plan.SEVEN_DAYS, currency="gbp")

        self.assertEqual(quote.currency, "GBP")
        self.assertEqual(quote.final_price, Decimal("8.00"))

    def test_zero_override_falls_back_to_usd(self):
        quote = self.resolver.quote(self.product, Plan.THIRTY_DAYS, currency="GBP")

        self.assertEqual(quote.currency, "USD")
        self.assertEqual(quote.final_price, Decimal("25.00"))

    def test_missing_override_falls_back_to_usd(self):
        quote = self.resolver.quote(self.product, Plan.LIFETIME, currency="INR")

        self.assertEqual(quote.currency, "USD")
        self.assertEqual(quote.base_price, Decimal("99.00"))

    def test_eur_falls_back_to_base_until_an_override_exists(self):
        product = ProductFactory(price_7_days=Decimal("10.00"))
        self.assertEqual(self.resolver.quote(product, Plan.SEVEN_DAYS, currency="EUR").final_price, Decimal("10.00"))

        product.currency_prices = {"EUR": {"7_days": "9"}}
        quote = self.resolver.quote(product, Plan.SEVEN_DAYS, currency="EUR")
        self.assertEqual(quote.final_price, Decimal("9.00"))
        self.assertEqual(quote.currency, "EUR")

    def test_trial_plan_is_not_quotable(self):
        with self.assertRaises(ValidationError):
            self.resolver.quote(self.product, Plan.TRIAL_1_DAY)

    def test_unpriced_plan_is_unavailable(self):
        product = ProductFactory(price_lifetime=Decimal("0.00"))
        with self.assertRaises(PlanUnavailable):
            self.resolver.quote(product, Plan.LIFETIME)

    def test_promo_discount_applies_to_quoted_price(self):
        PromoCodeFactory(code="HALF", value=Decimal("50"))
        quote = self.resolver.quote(self.product, Plan.SEVEN_DAYS, currency="GBP", promo_code="half")

        self.assertEqual(quote.promo_code, "HALF")
        self.assertEqual(quote.discount, Decimal("4.00"))
        self.assertEqual(quote.final_price, Decimal("4.00"))

    def test_quote_does_not_consume_and_redeem_does(self):
        promo = PromoCodeFactory(code="ONE", max_uses=1)
        quote = self.resolver.quote(self.product, Plan.SEVEN_DAYS, promo_code="ONE")
        self.resolver.quote(self.product, Plan.SEVEN_DAYS, promo_code="ONE")
        promo.refresh_from_db()
        self.assertEqual(promo.uses_count, 0)

        self.resolver.redeem(quote)
        promo.refresh_from_db()
        self.assertEqual(promo.uses_count, 1)

        with self.assertRaises(PromoCodeExhausted):
            self.resolver.redeem(quote)

    def test_redeem_without_promo_is_a_no_op(self):
        quote = self.resolver.quote(self.product, Plan.ONE_DAY)
        self.resolver.redeem(quote)
        self.assertFalse(PromoCode.objects.exists())

    def test_as_dict(self):
        quote = self.resolver.quote(self.product, Plan.ONE_DAY)
        data = quote.as_dict()

        self.assertEqual(data['product_id'], str(self.product.pk))
        self.assertEqual(data['discount_amount'], Decimal("0.00"))
        self.assertIsNone(data['promo_code'])
