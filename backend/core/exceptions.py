"""
Error taxonomy and DRF exception handler for the license store.

Every failure leaves the API as
``{"status": "error", "message": ..., "code": ..., ["details": ...]}``.
Business-rule rejections are expected and frequent; they are logged at INFO
and never as errors.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _first_message(data):
    """Pull the first human readable message out of a DRF error structure."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        for field, value in data.items():
            message = _first_message(value)
            if message:
                if field == 'non_field_errors':
                    return message
                return f"{field}: {message}"
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF.
    Standardizes all API error responses into the store's envelope.
    """
    response = exception_handler(exc, context)
    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'unknown view'

    if response is None:
        # Not an APIException: storage/database failure or a plain bug.
        logger.error("Unhandled error in %s", view_name, exc_info=exc)
        return Response({
            'status': 'error',
            'message': 'Internal server error',
            'code': 'server_error',
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    code = getattr(exc, 'default_code', 'error')
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes
        elif isinstance(codes, list) and len(codes) == 1 and isinstance(codes[0], str):
            code = codes[0]

    payload = {
        'status': 'error',
        'message': _first_message(response.data) or 'Request failed',
        'code': code,
    }
    if isinstance(response.data, dict) and set(response.data) != {'detail'}:
        payload['details'] = response.data
    extra = getattr(exc, 'extra', None)
    if extra:
        payload['details'] = extra

    if response.status_code >= 500:
        logger.error("%s failed: %s", view_name, payload['message'], exc_info=exc)
    elif isinstance(exc, BusinessRuleViolation):
        logger.info("%s rejected: %s", view_name, payload['message'])

    response.data = payload
    return response


# ----------------------------------------------------------------------
# Business rule violations (400)
# ----------------------------------------------------------------------
class BusinessRuleViolation(APIException):
    """An expected, user-actionable rejection."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The request could not be completed.'
    default_code = 'business_rule_violation'


class OutOfStock(BusinessRuleViolation):
    default_detail = 'Out of Stock! No unused keys found.'
    default_code = 'out_of_stock'

    def __init__(self, plan=None, detail=None):
        if detail is None and plan:
            detail = f"Out of Stock! No unused keys found for {plan}."
        super().__init__(detail)
        self.plan = plan


class InsufficientBalance(BusinessRuleViolation):
    default_detail = 'Insufficient wallet balance'
    default_code = 'insufficient_balance'


class PromoCodeInvalid(BusinessRuleViolation):
    default_detail = 'Invalid or inactive promo code'
    default_code = 'promo_invalid'


class PromoCodeExpired(BusinessRuleViolation):
    default_detail = 'Promo code has expired'
    default_code = 'promo_expired'


class PromoCodeExhausted(BusinessRuleViolation):
    default_detail = 'Promo code usage limit reached'
    default_code = 'promo_exhausted'


class TrialAlreadyClaimed(BusinessRuleViolation):
    default_detail = 'You have already claimed the free trial for this product.'
    default_code = 'trial_already_claimed'


class TrialNotAvailable(BusinessRuleViolation):
    default_detail = 'This product does not offer a free trial.'
    default_code = 'trial_not_available'


class PlanUnavailable(BusinessRuleViolation):
    default_detail = 'This plan is not available for the selected product.'
    default_code = 'plan_unavailable'


class InvalidStatusTransition(BusinessRuleViolation):
    default_detail = 'This status change is not allowed.'
    default_code = 'invalid_status_transition'


class RequestAlreadyProcessed(BusinessRuleViolation):
    default_detail = 'This request has already been processed.'
    default_code = 'already_processed'


class LicenseKeyInUse(BusinessRuleViolation):
    default_detail = 'Only unused license keys can be deleted.'
    default_code = 'license_key_in_use'


class ProductInUse(BusinessRuleViolation):
    default_detail = 'Cannot delete this product because it has associated orders/licenses.'
    default_code = 'product_in_use'


# ----------------------------------------------------------------------
# Conflicts (400, reported per batch)
# ----------------------------------------------------------------------
class ConflictError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The submitted data conflicts with existing records.'
    default_code = 'conflict'


class DuplicateLicenseKeys(ConflictError):
    default_detail = 'One or more license keys already exist.'
    default_code = 'duplicate_license_keys'

    def __init__(self, duplicates, detail=None):
        super().__init__(detail)
        self.duplicates = list(duplicates)
        self.extra = {'duplicates': self.duplicates}


# ----------------------------------------------------------------------
# Dependency failures (500)
# ----------------------------------------------------------------------
class DependencyFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'A backing service failed. Please try again later.'
    default_code = 'dependency_failure'


class StorageUnavailable(DependencyFailure):
    default_detail = 'File upload failed. Please try again later.'
    default_code = 'storage_unavailable'


class LedgerInconsistency(DependencyFailure):
    """A license was claimed but the matching wallet debit did not happen."""
    default_detail = 'The purchase could not be completed. Support has been notified.'
    default_code = 'ledger_inconsistency'
