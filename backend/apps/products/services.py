# FILE: /backend/apps/products/services.py
"""
Service layer for catalogue writes: cover image upload and guarded deletion.
"""
import logging

from django.db import transaction
from django.db.models import ProtectedError

from backend.core.exceptions import ProductInUse
from backend.core.storage import store_attachment

from .models import Product

logger = logging.getLogger(__name__)


def save_product(*, serializer, actor) -> Product:
    """
    Persist a validated product serializer, uploading the cover image first
    so a failed upload never leaves a product pointing at a missing file.
    """
    image = serializer.validated_data.pop('image', None)
    extra = {}
    if image is not None:
        extra['image_url'] = store_attachment(image, "products")
    if serializer.instance is None:
        extra['created_by'] = actor

    product = serializer.save(**extra)
    logger.info("Product %s saved by %s", product.id, getattr(actor, 'email', actor))
    return product


def delete_product(product: Product, actor=None) -> None:
    """Delete a product unless an order or license key still references it."""
    product_id = product.id
    try:
        with transaction.atomic():
            product.delete()
    except ProtectedError:
        raise ProductInUse()
    logger.info("Product %s deleted by %s", product_id, getattr(actor, 'email', actor))
