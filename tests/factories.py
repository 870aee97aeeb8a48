# FILE: tests/factories.py
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model

from backend.apps.licenses.models import LicenseKey
from backend.apps.orders.models import Order
from backend.apps.payments.models import PromoCode, TopUpRequest
from backend.apps.products.models import Plan, Product

User = get_user_model()


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    full_name = factory.Faker('name')
    password = factory.django.Password('testpass123')
    is_active = True
    role = User.Role.USER
    balance = Decimal("0.00")
    currency = "USD"


class AdminFactory(UserFactory):
    role = User.Role.ADMIN
    is_staff = True


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    name = factory.Sequence(lambda n: f"Product {n}")
    description = "Test product"
    price_1_day = Decimal("2.00")
    price_7_days = Decimal("10.00")
    price_30_days = Decimal("25.00")
    price_lifetime = Decimal("99.00")
    is_active = True


class LicenseKeyFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = LicenseKey

    product = factory.SubFactory(ProductFactory)
    plan = Plan.SEVEN_DAYS
    key = factory.Sequence(lambda n: f"KEY-{n:08d}")
    status = LicenseKey.Status.UNUSED


class PromoCodeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PromoCode

    code = factory.Sequence(lambda n: f"PROMO{n}")
    discount_type = PromoCode.DiscountType.PERCENT
    value = Decimal("10.00")
    max_uses = None
    is_active = True


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    user = factory.SubFactory(UserFactory)
    product = factory.SubFactory(ProductFactory)
    plan = Plan.SEVEN_DAYS
    base_price = Decimal("10.00")
    price = Decimal("10.00")
    payment_method = Order.PaymentMethod.MANUAL
    payment_channel = "bank"
    transaction_id = factory.Sequence(lambda n: f"TX-{n}")
    status = Order.Status.PENDING


class TopUpRequestFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = TopUpRequest

    user = factory.SubFactory(UserFactory)
    amount = Decimal("20.00")
    currency = "USD"
    payment_method = "bank"
    transaction_id = factory.Sequence(lambda n: f"TOPUP-{n}")
