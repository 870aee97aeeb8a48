"""
License Pool.

Claiming is the one place two buyers can race for the same row. A claim
locks the oldest unused candidate with ``SKIP LOCKED`` and then flips it with
an UPDATE guarded on ``status='unused'``; only the caller whose UPDATE
touches the row owns the key. On backends without row locks the guarded
UPDATE alone decides the winner and the loser moves on to the next key.
"""
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from backend.apps.products.models import Plan, Product
from backend.core.exceptions import DuplicateLicenseKeys, LicenseKeyInUse, OutOfStock

from .models import LicenseKey

logger = logging.getLogger(__name__)


@dataclass
class BulkAddResult:
    created: list = field(default_factory=list)
    duplicates: list = field(default_factory=list)

    @property
    def created_count(self):
        return len(self.created)


class LicensePool:

    def claim_and_assign(self, product_id, plan, user_id):
        """Assign one unused key of exactly ``plan`` to ``user_id``."""
        with transaction.atomic():
            while True:
                candidate = (
                    LicenseKey.objects
                    .select_for_update(skip_locked=True)
                    .filter(product_id=product_id, plan=plan, status=LicenseKey.Status.UNUSED)
                    .order_by("created_at", "id")
                    .values_list("pk", flat=True)
                    .first()
                )
                if candidate is None:
                    logger.info("Out of stock: product %s plan %s", product_id, plan)
                    raise OutOfStock(plan=plan)

                claimed = LicenseKey.objects.filter(
                    pk=candidate, status=LicenseKey.Status.UNUSED
                ).update(
                    status=LicenseKey.Status.ASSIGNED,
                    assigned_to_id=user_id,
                    assigned_at=timezone.now(),
                )
                if claimed:
                    license_key = LicenseKey.objects.get(pk=candidate)
                    logger.info(
                        "License %s (%s) assigned to user %s",
                        license_key.pk, plan, user_id,
                    )
                    return license_key
                # Another claimer flipped this row first; it is no longer a candidate.
                logger.debug("Lost claim race for license %s, retrying", candidate)

    def bulk_add(self, product_id, plan, keys):
        """
        Insert ``keys`` for one product/plan. Duplicates (within the batch or
        against the pool) are skipped and reported; the rest are stored.
        """
        if plan not in Plan.values:
            raise ValidationError({'plan': 'Invalid Plan'})
        if not Product.objects.filter(pk=product_id).exists():
            raise NotFound("Product not found")

        unique_keys, duplicates = self._dedupe(keys)
        if not unique_keys and not duplicates:
            raise ValidationError({'keys': 'At least one license key is required.'})
        limit = settings.LICENSE_BULK_ADD_MAX
        if len(unique_keys) + len(duplicates) > limit:
            raise ValidationError({'keys': f'At most {limit} keys can be added at once.'})

        existing = set(
            LicenseKey.objects.filter(key__in=unique_keys).values_list("key", flat=True)
        )
        duplicates.extend(k for k in unique_keys if k in existing)
        fresh = [k for k in unique_keys if k not in existing]
        if not fresh:
            raise DuplicateLicenseKeys(duplicates)

        result = BulkAddResult(duplicates=duplicates)
        try:
            with transaction.atomic():
                result.created = LicenseKey.objects.bulk_create(
                    [LicenseKey(product_id=product_id, plan=plan, key=k) for k in fresh]
                )
        except IntegrityError:
            # A concurrent import took some of these keys; insert one by one.
            logger.warning("Bulk license insert collided; retrying row by row")
            for k in fresh:
                try:
                    with transaction.atomic():
                        result.created.append(
                            LicenseKey.objects.create(product_id=product_id, plan=plan, key=k)
                        )
                except IntegrityError:
                    result.duplicates.append(k)
            if not result.created:
                raise DuplicateLicenseKeys(result.duplicates)

        logger.info(
            "Added %s %s keys for product %s (%s duplicates skipped)",
            result.created_count, plan, product_id, len(result.duplicates),
        )
        return result

    def delete_unused(self, product_id=None):
        """Remove unused keys, optionally for one product. Returns the count."""
        with transaction.atomic():
            queryset = LicenseKey.objects.filter(status=LicenseKey.Status.UNUSED)
            if product_id:
                queryset = queryset.filter(product_id=product_id)
            locked = list(queryset.select_for_update(skip_locked=True).values_list("pk", flat=True))
            if not locked:
                return 0
            deleted, _ = LicenseKey.objects.filter(
                pk__in=locked, status=LicenseKey.Status.UNUSED
            ).delete()
        logger.info("Deleted %s unused license keys (product=%s)", deleted, product_id or "all")
        return deleted

    def delete_one(self, key_id):
        with transaction.atomic():
            try:
                license_key = LicenseKey.objects.select_for_update().get(pk=key_id)
            except LicenseKey.DoesNotExist:
                raise NotFound("License key not found")
            if license_key.status != LicenseKey.Status.UNUSED:
                raise LicenseKeyInUse()
            LicenseKey.objects.filter(pk=key_id, status=LicenseKey.Status.UNUSED).delete()
        logger.info("Deleted license key %s", key_id)

    @staticmethod
    def _dedupe(keys):
        seen = set()
        unique_keys, duplicates = [], []
        for raw in keys or []:
            k = str(raw).strip()
            if not k:
                continue
            if k in seen:
                duplicates.append(k)
                continue
            seen.add(k)
            unique_keys.append(k)
        return unique_keys, duplicates
