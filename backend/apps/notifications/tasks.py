# backend/apps/notifications/tasks.py
import logging
import smtplib

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


@shared_task(bind=True, autoretry_for=(smtplib.SMTPException, ConnectionError), retry_backoff=True, max_retries=3)
def send_email_notification(self, notification_id):
    """Deliver a queued email notification."""
    try:
        notification = Notification.objects.get(id=notification_id)
    except Notification.DoesNotExist:
        logger.error(f"Notification {notification_id} not found.")
        return {'status': 'missing'}

    if notification.status == 'sent':
        logger.warning(f"Notification {notification_id} already sent, skipping.")
        return {'status': 'skipped'}

    email = EmailMultiAlternatives(
        subject=notification.subject,
        body=notification.body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[notification.recipient],
        reply_to=[settings.SUPPORT_EMAIL],
    )
    if notification.html_body:
        email.attach_alternative(notification.html_body, "text/html")

    try:
        email.send(fail_silently=False)
    except (smtplib.SMTPException, ConnectionError) as e:
        logger.exception(f"Failed to send email notification {notification_id}")
        notification.status = 'failed'
        notification.error_message = str(e)
        notification.save(update_fields=['status', 'error_message', 'updated_at'])
        raise  # trigger retry

    notification.status = 'sent'
    notification.sent_at = timezone.now()
    notification.error_message = ''
    notification.save(update_fields=['status', 'sent_at', 'error_message', 'updated_at'])
    logger.info(f"Email notification {notification_id} sent to {notification.recipient}")
    return {'status': 'sent'}
