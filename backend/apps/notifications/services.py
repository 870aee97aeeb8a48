# FILE: backend/apps/notifications/services.py
"""
Outbound notifications. Sending is fire-and-forget: a failure to render,
record or queue an email is logged and never propagates into the business
operation that triggered it.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from .models import Notification
from .tasks import send_email_notification

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Usage:
        NotificationService.send_email('a@b.c', 'Subject', 'emails/x.html', {'k': 'v'})
        NotificationService.license_delivered(order)
    """

    @classmethod
    def send_email(cls, recipient, subject, template_name, context=None, user=None):
        """Render, record and queue one email. Returns the Notification or None."""
        if not recipient:
            logger.warning(f"Cannot send '{subject}': no recipient address.")
            return None
        try:
            html_body = render_to_string(template_name, context or {})
            notification = Notification.objects.create(
                user=user,
                recipient=recipient,
                subject=subject,
                body=strip_tags(html_body),
                html_body=html_body,
            )
            send_email_notification.delay(str(notification.id))
        except Exception:
            logger.exception(f"Notification '{subject}' to {recipient} could not be dispatched")
            return None
        logger.info(f"Notification {notification.id} queued for {recipient}")
        return notification

    @classmethod
    def send_on_commit(cls, recipient, subject, template_name, context=None, user=None):
        """Queue the email only once the surrounding transaction commits."""
        transaction.on_commit(
            lambda: cls.send_email(recipient, subject, template_name, context, user=user)
        )

    # ------------------------------------------------------------------
    # Store events
    # ------------------------------------------------------------------
    @classmethod
    def license_delivered(cls, order):
        product = order.product
        cls.send_on_commit(
            order.user.email,
            f"Your {product.name} license key",
            "emails/license_delivered.html",
            {
                'name': order.user.get_short_name(),
                'order_number': order.order_number,
                'product_name': product.name,
                'plan': order.get_plan_display(),
                'license_key': order.license_key.key if order.license_key else '',
                'download_link': product.download_link,
                'tutorial_video_link': product.tutorial_video_link,
                'activation_process': product.activation_process,
            },
            user=order.user,
        )

    @classmethod
    def topup_processed(cls, topup):
        approved = topup.status == topup.Status.APPROVED
        cls.send_on_commit(
            topup.user.email,
            "Balance top-up approved" if approved else "Balance top-up rejected",
            "emails/topup_processed.html",
            {
                'name': topup.user.get_short_name(),
                'approved': approved,
                'amount': topup.amount,
                'currency': topup.currency,
                'credited_amount': topup.credited_amount,
                'notes': topup.review_notes,
            },
            user=topup.user,
        )

    @classmethod
    def reset_requested(cls, reset_request):
        if not settings.ADMIN_NOTIFICATION_EMAIL:
            return
        cls.send_on_commit(
            settings.ADMIN_NOTIFICATION_EMAIL,
            "New credentials reset request",
            "emails/reset_requested.html",
            {
                'user_email': reset_request.user.email,
                'product_name': reset_request.product.name,
                'order_number': reset_request.order.order_number,
                'username': reset_request.username,
            },
        )

    @classmethod
    def reset_processed(cls, reset_request):
        approved = reset_request.status == reset_request.Status.APPROVED
        cls.send_on_commit(
            reset_request.user.email,
            "Credentials reset approved" if approved else "Credentials reset request rejected",
            "emails/reset_processed.html",
            {
                'name': reset_request.user.get_short_name(),
                'approved': approved,
                'product_name': reset_request.product.name,
                'admin_response': reset_request.admin_response,
            },
            user=reset_request.user,
        )
