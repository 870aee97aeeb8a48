"""
Balance top-up workflow.

A request is created ``pending`` and later approved or rejected by an admin.
Approval flips the status with a conditional UPDATE before crediting, so a
request can be credited at most once however many times it is approved.
"""
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from backend.apps.notifications.services import NotificationService
from backend.core.exceptions import RequestAlreadyProcessed
from backend.core.storage import store_attachment

from .ledger import WalletLedger
from .models import TopUpRequest

logger = logging.getLogger(__name__)


class TopUpService:

    def __init__(self, ledger=None, notifier=NotificationService):
        self.ledger = ledger or WalletLedger()
        self.notifier = notifier

    def create_request(self, user, amount, payment_method, transaction_id, currency="USD", proof=None):
        proof_url = store_attachment(proof, "balance") if proof else ""
        topup = TopUpRequest.objects.create(
            user=user,
            amount=amount,
            currency=(currency or "USD").upper(),
            payment_method=payment_method,
            transaction_id=transaction_id,
            proof_url=proof_url,
        )
        logger.info("Top-up request %s created for user %s (%s %s)", topup.id, user.id, amount, topup.currency)
        return topup

    def approve(self, request_id, reviewer=None, notes=""):
        """Credit the wallet once and mark the request approved."""
        with transaction.atomic():
            topup = self._get_locked(request_id)
            if topup.status == TopUpRequest.Status.APPROVED:
                raise RequestAlreadyProcessed("Already approved")
            if topup.status != TopUpRequest.Status.PENDING:
                raise RequestAlreadyProcessed(f"Request already {topup.status}")

            now = timezone.now()
            flipped = TopUpRequest.objects.filter(
                pk=topup.pk, status=TopUpRequest.Status.PENDING
            ).update(
                status=TopUpRequest.Status.APPROVED,
                reviewed_by=reviewer,
                review_notes=notes or "",
                processed_at=now,
                updated_at=now,
            )
            if not flipped:
                raise RequestAlreadyProcessed("Already approved")

            usd_amount = self.ledger.credit_from_foreign_amount(
                topup.user_id, topup.amount, topup.currency, reference=f"topup:{topup.pk}"
            )
            TopUpRequest.objects.filter(pk=topup.pk).update(credited_amount=usd_amount)

            topup.refresh_from_db()
            self.notifier.topup_processed(topup)

        logger.info(
            "Top-up %s approved: %s %s credited as %s USD",
            topup.id, topup.amount, topup.currency, usd_amount,
        )
        return topup

    def reject(self, request_id, reviewer=None, notes=""):
        """Close a pending request without touching the wallet."""
        with transaction.atomic():
            now = timezone.now()
            rejected = TopUpRequest.objects.filter(
                pk=request_id, status=TopUpRequest.Status.PENDING
            ).update(
                status=TopUpRequest.Status.REJECTED,
                reviewed_by=reviewer,
                review_notes=notes or "",
                processed_at=now,
                updated_at=now,
            )
            if not rejected:
                current = TopUpRequest.objects.filter(pk=request_id).values_list("status", flat=True).first()
                if current is None:
                    raise NotFound("Request not found")
                raise RequestAlreadyProcessed(f"Request already {current}")

            topup = TopUpRequest.objects.select_related("user").get(pk=request_id)
            self.notifier.topup_processed(topup)

        logger.info("Top-up %s rejected", request_id)
        return topup

    def user_requests(self, user):
        return TopUpRequest.objects.filter(user=user)

    def all_requests(self, status=None):
        queryset = TopUpRequest.objects.select_related("user")
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @staticmethod
    def _get_locked(request_id):
        try:
            return TopUpRequest.objects.select_for_update().get(pk=request_id)
        except TopUpRequest.DoesNotExist:
            raise NotFound("Request not found")
