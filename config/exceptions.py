"""
Project-wide error handling.

Every app roots its domain exceptions in ``ServiceError``. Services raise,
views stay thin, and ``api_exception_handler`` turns the exception into the
``{"success": false, "error": "..."}`` envelope.

Status mapping is carried on the exception class itself (``status_code``),
the same way DRF's ``APIException`` does it: 400 by default, 404 for
not-found errors, 403 for permission errors.

A Django ``ValidationError`` that reaches the handler comes from an ORM
lookup on a malformed identifier, so it is reported as a 404.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for all domain service errors."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundServiceError(ServiceError):
    """Base for errors raised when a scoped entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class PermissionServiceError(ServiceError):
    """Base for errors raised when the actor lacks a required permission."""
    status_code = status.HTTP_403_FORBIDDEN


def api_exception_handler(exc, context):
    """
    DRF exception handler returning the action envelope.

    Domain errors become ``{"success": false, "error": str(exc)}``.
    DRF's own exceptions keep their payload and gain ``success`` and
    ``error`` keys so clients can rely on one shape.
    """
    if isinstance(exc, ServiceError):
        view = context.get('view')
        logger.warning(
            "%s in %s: %s",
            exc.__class__.__name__,
            view.__class__.__name__ if view else 'unknown view',
            exc,
        )
        return Response(
            {'success': False, 'error': str(exc)},
            status=exc.status_code,
        )

    if isinstance(exc, DjangoValidationError):
        logger.info("Malformed identifier: %s", exc.messages)
        return Response(
            {'success': False, 'error': 'Not found', 'errors': exc.messages},
            status=status.HTTP_404_NOT_FOUND,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict):
        if 'detail' in data:
            data['error'] = str(data['detail'])
        else:
            data['error'] = _first_message(data)
        data['success'] = False
    else:
        messages = list(data) if isinstance(data, (list, tuple)) else [data]
        response.data = {
            'success': False,
            'error': str(messages[0]) if messages else 'Invalid request',
            'errors': messages,
        }
    return response


def _first_message(data):
    """Pick a readable message out of a DRF field-error dictionary."""
    for field, errors in data.items():
        if isinstance(errors, (list, tuple)) and errors:
            message = errors[0]
        else:
            message = errors
        if field == 'non_field_errors':
            return str(message)
        return f"{field}: {message}"
    return 'Invalid request'
