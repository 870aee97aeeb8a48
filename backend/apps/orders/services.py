"""
Order State Machine.

    pending --(admin complete: claim key)--> completed
    pending --(admin reject)---------------> rejected
    (wallet / trial purchase) -------------> completed

Every path that completes an order claims its license key first and only
then charges or records anything, all inside one database transaction: a
failure at any step rolls the whole purchase back, claimed key included.
"""
import logging
import time

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from backend.apps.licenses.services import LicensePool
from backend.apps.notifications.services import NotificationService
from backend.apps.payments.ledger import WalletLedger
from backend.apps.products.models import Product
from backend.apps.products.pricing import BASE_CURRENCY, PriceResolver
from backend.core.exceptions import (
    InsufficientBalance,
    InvalidStatusTransition,
    LedgerInconsistency,
    OutOfStock,
    TrialAlreadyClaimed,
    TrialNotAvailable,
)
from backend.core.storage import store_attachment

from .models import Order, generate_order_number

logger = logging.getLogger(__name__)
reconciliation_logger = logging.getLogger("backend.reconciliation")


class OrderService:
    """
    Collaborators are injected so tests can swap any of them:

        OrderService(pricing=PriceResolver(), pool=LicensePool(),
                     ledger=WalletLedger(), notifier=NotificationService)
    """

    def __init__(self, pricing=None, pool=None, ledger=None, notifier=NotificationService):
        self.pricing = pricing or PriceResolver()
        self.pool = pool or LicensePool()
        self.ledger = ledger or WalletLedger()
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Creation paths
    # ------------------------------------------------------------------
    def create_manual_order(self, user, product_id, plan, payment_channel="", transaction_id="",
                            promo_code=None, proof=None):
        """Record a pending order paid outside the store; no key is claimed yet."""
        product = self._get_product(product_id)
        quote = self.pricing.quote(product, plan, currency=user.currency, promo_code=promo_code)
        proof_url = store_attachment(proof, "orders") if proof else ""

        with transaction.atomic():
            self.pricing.redeem(quote)
            order = Order.objects.create(
                user=user,
                product=product,
                plan=plan,
                currency=quote.currency,
                base_price=quote.base_price,
                discount_amount=quote.discount,
                price=quote.final_price,
                promo_code=quote.promo_code,
                payment_method=Order.PaymentMethod.MANUAL,
                payment_channel=payment_channel or "",
                transaction_id=transaction_id or "",
                payment_proof_url=proof_url,
                status=Order.Status.PENDING,
            )
        logger.info("Manual order %s created for user %s", order.order_number, user.pk)
        return order

    def purchase_with_wallet(self, user, product_id, plan, promo_code=None):
        """Claim a key, charge the wallet and record a completed order."""
        product = self._get_product(product_id)
        # Wallet balances are USD, so wallet prices are always quoted in USD.
        quote = self.pricing.quote(product, plan, currency=BASE_CURRENCY, promo_code=promo_code)
        if self.ledger.balance(user.pk) < quote.final_price:
            logger.info("Wallet purchase refused for user %s: insufficient balance", user.pk)
            raise InsufficientBalance()

        order_number = generate_order_number()
        with transaction.atomic():
            license_key = self.pool.claim_and_assign(product.pk, plan, user.pk)
            self.pricing.redeem(quote)
            try:
                self.ledger.debit(user.pk, quote.final_price, reference=f"order:{order_number}")
            except InsufficientBalance:
                logger.info(
                    "Debit refused for user %s after claiming license %s (order %s); "
                    "purchase rolled back",
                    user.pk, license_key.pk, order_number,
                )
                raise
            except DatabaseError as exc:
                reconciliation_logger.critical(
                    "Debit failed after license %s was claimed for user %s (order %s); "
                    "purchase rolled back",
                    license_key.pk, user.pk, order_number,
                    exc_info=True,
                )
                raise LedgerInconsistency() from exc

            order = Order.objects.create(
                order_number=order_number,
                user=user,
                product=product,
                plan=plan,
                currency=quote.currency,
                base_price=quote.base_price,
                discount_amount=quote.discount,
                price=quote.final_price,
                promo_code=quote.promo_code,
                payment_method=Order.PaymentMethod.WALLET,
                transaction_id=f"WALLET-{int(time.time() * 1000)}",
                status=Order.Status.COMPLETED,
                license_key=license_key,
                completed_at=timezone.now(),
            )
            self.notifier.license_delivered(order)

        logger.info("Wallet order %s completed for user %s", order.order_number, user.pk)
        return order

    def claim_trial(self, user, product_id):
        """One free trial per user and product, fulfilled from the trial plan pool."""
        product = self._get_product(product_id)
        plan = product.trial_plan
        if plan is None:
            raise TrialNotAvailable()

        with transaction.atomic():
            # Serialise trial claims per user before the existence check.
            get_user_model().objects.select_for_update().filter(pk=user.pk).exists()
            if Order.objects.filter(
                user=user, product=product, payment_method=Order.PaymentMethod.FREE_TRIAL
            ).exists():
                logger.info("Trial for product %s already claimed by user %s", product.pk, user.pk)
                raise TrialAlreadyClaimed()

            license_key = self.pool.claim_and_assign(product.pk, plan, user.pk)
            try:
                with transaction.atomic():
                    order = Order.objects.create(
                        user=user,
                        product=product,
                        plan=plan,
                        payment_method=Order.PaymentMethod.FREE_TRIAL,
                        transaction_id=f"TRIAL-{int(time.time() * 1000)}",
                        status=Order.Status.COMPLETED,
                        license_key=license_key,
                        completed_at=timezone.now(),
                    )
            except IntegrityError:
                raise TrialAlreadyClaimed()
            self.notifier.license_delivered(order)

        logger.info("Trial order %s completed for user %s", order.order_number, user.pk)
        return order

    # ------------------------------------------------------------------
    # Admin transitions
    # ------------------------------------------------------------------
    def update_status(self, order_id, new_status, actor=None):
        if new_status not in (Order.Status.COMPLETED, Order.Status.REJECTED):
            raise ValidationError({'status': "Status must be 'completed' or 'rejected'."})

        with transaction.atomic():
            order = self._get_locked(order_id)
            if order.status == new_status:
                return order
            if order.status != Order.Status.PENDING:
                raise InvalidStatusTransition(f"Order is already {order.status}.")

            if new_status == Order.Status.REJECTED:
                self._transition(order, status=Order.Status.REJECTED)
                logger.info("Order %s rejected by %s", order.order_number, getattr(actor, 'pk', None))
                return order

            try:
                license_key = self.pool.claim_and_assign(order.product_id, order.plan, order.user_id)
            except OutOfStock:
                raise OutOfStock(plan=order.plan, detail=f"No stock available for '{order.plan}' plan!")
            self._transition(
                order,
                status=Order.Status.COMPLETED,
                license_key=license_key,
                completed_at=timezone.now(),
            )
            self.notifier.license_delivered(order)

        logger.info("Order %s completed by %s", order.order_number, getattr(actor, 'pk', None))
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def orders_for_user(self, user):
        return Order.objects.filter(user=user).select_related("product", "license_key")

    def all_orders(self, status=None):
        queryset = Order.objects.select_related("user", "product", "license_key")
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _get_product(product_id):
        try:
            return Product.objects.get(pk=product_id, is_active=True)
        except Product.DoesNotExist:
            raise NotFound("Product not found")

    @staticmethod
    def _get_locked(order_id):
        try:
            return Order.objects.select_for_update().get(pk=order_id)
        except Order.DoesNotExist:
            raise NotFound("Order not found")

    @staticmethod
    def _transition(order, **changes):
        """Apply ``changes`` only if the order is still pending."""
        updated = Order.objects.filter(pk=order.pk, status=Order.Status.PENDING).update(
            updated_at=timezone.now(), **changes
        )
        if not updated:
            raise InvalidStatusTransition("Order was processed concurrently.")
        order.refresh_from_db()
