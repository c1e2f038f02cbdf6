"""
Marketplace error taxonomy and the DRF exception handler that renders it.

Every error response carries a machine-readable ``kind`` (taxonomy family)
and ``code`` (specific failure) next to the human-readable message.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger('security')


class MarketplaceError(drf_exceptions.APIException):
    """Base class for all marketplace errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    kind = 'validation_error'
    default_detail = 'Invalid request.'
    default_code = 'invalid'


# ============================
# Validation (400)
# ============================

class ValidationError(MarketplaceError):
    """Missing or malformed input. Nothing was mutated."""
    kind = 'validation_error'


class InvalidStatus(ValidationError):
    default_detail = 'Invalid order status.'
    default_code = 'invalid_status'


# ============================
# Not found (404)
# ============================

class NotFoundError(MarketplaceError):
    """Referenced user, order or notification does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    kind = 'not_found'
    default_detail = 'Not found.'
    default_code = 'not_found'


class UserNotFound(NotFoundError):
    default_detail = 'User not found.'
    default_code = 'user_not_found'


class OrderNotFound(NotFoundError):
    default_detail = 'Order not found.'
    default_code = 'order_not_found'


class OrderNotActive(NotFoundError):
    default_detail = 'Active order not found.'
    default_code = 'order_not_active'


# ============================
# Conflict (409)
# ============================

class ConflictError(MarketplaceError):
    """Request collides with the current state of an order."""
    status_code = status.HTTP_409_CONFLICT
    kind = 'conflict'
    default_detail = 'Conflict.'
    default_code = 'conflict'


class SelfTrade(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'You cannot buy your own order.'
    default_code = 'self_trade'


class AlreadyJoined(ConflictError):
    default_detail = 'Another buyer has already joined this order.'
    default_code = 'already_joined'


class InvalidTransition(ConflictError):
    default_detail = 'This status change is not allowed.'
    default_code = 'invalid_transition'


class CodeExhausted(ConflictError):
    default_detail = 'Could not generate a unique order code.'
    default_code = 'code_exhausted'


# ============================
# Forbidden (403)
# ============================

class ForbiddenError(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = 'forbidden'
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'


class NotParticipant(ForbiddenError):
    default_detail = 'You are not allowed to change this order.'
    default_code = 'not_participant'


# ============================
# Storage (500)
# ============================

class StorageError(MarketplaceError):
    """Unexpected persistence failure. Details go to the log, not the client."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = 'storage_error'
    default_detail = 'Internal storage error.'
    default_code = 'storage_error'


KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: 'validation_error',
    status.HTTP_403_FORBIDDEN: 'forbidden',
    status.HTTP_404_NOT_FOUND: 'not_found',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'validation_error',
    status.HTTP_409_CONFLICT: 'conflict',
    status.HTTP_429_TOO_MANY_REQUESTS: 'throttled',
}


def api_exception_handler(exc, context):
    """
    Render every API error as ``{"error", "kind", "code"}``.

    Database failures are logged with the traceback and reported as an
    opaque StorageError.
    """
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception(
            f"Storage failure in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        exc = StorageError()
    elif isinstance(exc, DjangoValidationError):
        exc = ValidationError(detail=' '.join(exc.messages))

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, MarketplaceError):
        response.data = {
            'error': str(exc.detail),
            'kind': exc.kind,
            'code': exc.detail.code,
        }
    elif isinstance(exc, drf_exceptions.ValidationError):
        response.data = {
            'error': 'Invalid request data.',
            'kind': 'validation_error',
            'code': 'invalid',
            'fields': exc.detail,
        }
    else:
        detail = exc.detail if isinstance(exc, drf_exceptions.APIException) else response.data
        response.data = {
            'error': str(detail),
            'kind': KIND_BY_STATUS.get(response.status_code, 'error'),
            'code': getattr(detail, 'code', 'error'),
        }

    return response
