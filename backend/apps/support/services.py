"""
Credential reset workflow: pending -> approved | rejected, once.
"""
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from backend.apps.notifications.services import NotificationService
from backend.apps.orders.models import Order
from backend.core.exceptions import RequestAlreadyProcessed

from .models import CredentialResetRequest

logger = logging.getLogger(__name__)


class ResetRequestService:

    def __init__(self, notifier=NotificationService):
        self.notifier = notifier

    def create_request(self, user, product_id, order_id, username, password):
        order = Order.objects.filter(pk=order_id, user=user, product_id=product_id).select_related("product").first()
        if order is None:
            raise PermissionDenied("Order not found")

        with transaction.atomic():
            reset_request = CredentialResetRequest(
                user=user,
                product=order.product,
                order=order,
                username=username,
            )
            reset_request.set_password(password)
            reset_request.save()
            self.notifier.reset_requested(reset_request)

        logger.info("Credential reset request %s created by user %s", reset_request.pk, user.pk)
        return reset_request

    def update_status(self, request_id, status, admin_response="", actor=None):
        with transaction.atomic():
            now = timezone.now()
            updated = CredentialResetRequest.objects.filter(
                pk=request_id, status=CredentialResetRequest.Status.PENDING
            ).update(
                status=status,
                admin_response=admin_response or "",
                reviewed_by=actor,
                processed_at=now,
                updated_at=now,
            )
            if not updated:
                current = (
                    CredentialResetRequest.objects.filter(pk=request_id)
                    .values_list("status", flat=True)
                    .first()
                )
                if current is None:
                    raise NotFound("Request not found")
                raise RequestAlreadyProcessed(f"Request already {current}")

            reset_request = CredentialResetRequest.objects.select_related("user", "product").get(pk=request_id)
            self.notifier.reset_processed(reset_request)

        logger.info("Credential reset request %s %s", request_id, status)
        return reset_request

    def user_requests(self, user):
        return CredentialResetRequest.objects.filter(user=user).select_related("product")

    def all_requests(self, status=None):
        queryset = CredentialResetRequest.objects.select_related("user", "product", "order")
        if status:
            queryset = queryset.filter(status=status)
        return queryset
