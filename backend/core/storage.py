"""
Attachment storage for payment proofs and product images.

Files go through Django's ``default_storage`` (S3 via django-storages when a
bucket is configured); callers only ever keep the returned URL.
"""
import logging
import re
import uuid

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.core.files.storage import default_storage
from rest_framework.exceptions import ValidationError

from .exceptions import StorageUnavailable

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9.]')


def validate_attachment(upload):
    """Reject files that are too large or of a type we do not accept."""
    if upload.size > settings.UPLOAD_MAX_BYTES:
        raise ValidationError({'file': f"File exceeds the {settings.UPLOAD_MAX_BYTES} byte limit."})
    content_type = getattr(upload, 'content_type', None)
    if content_type not in settings.UPLOAD_ALLOWED_CONTENT_TYPES:
        raise ValidationError({'file': f"Unsupported file type: {content_type}."})


def store_attachment(upload, folder):
    """Save an uploaded file under ``folder`` and return its public URL."""
    validate_attachment(upload)
    clean_name = _UNSAFE_CHARS.sub('', upload.name or '') or 'upload'
    name = f"{folder}/{uuid.uuid4().hex}-{clean_name}"
    try:
        saved_name = default_storage.save(name, upload)
        url = default_storage.url(saved_name)
    except (OSError, BotoCoreError, ClientError) as exc:
        logger.exception("Attachment upload to %s failed", folder)
        raise StorageUnavailable() from exc
    logger.info("Stored attachment %s", saved_name)
    return url
