"""
Error taxonomy and custom exception handler for DRF

Services raise the four domain errors below. They are APIException
subclasses, so DRF turns them into responses with the right status code
without any try/except in the views.
"""
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import exceptions, status
from django.db import IntegrityError
import logging

logger = logging.getLogger(__name__)


class NotFound(exceptions.NotFound):
    """Referenced entity does not exist."""
    default_detail = 'Not found.'


class Conflict(exceptions.APIException):
    """Uniqueness violation: duplicate like, follow, email or username."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class Forbidden(exceptions.PermissionDenied):
    """Ownership check failed."""
    default_detail = 'You can only modify your own content.'


class BadRequest(exceptions.APIException):
    """Malformed input, e.g. following yourself."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that:
    1. Logs unexpected exceptions
    2. Converts Django exceptions to DRF responses
    3. Provides consistent {'error', 'details'} format
    """
    response = exception_handler(exc, context)

    if response is not None:
        if not isinstance(response.data, dict) or 'error' not in response.data:
            response.data = {
                'error': str(exc.detail) if isinstance(exc, exceptions.APIException) else str(exc),
                'details': response.data
            }
        return response

    if isinstance(exc, IntegrityError):
        logger.warning(f"IntegrityError: {exc}")
        return Response(
            {'error': 'Data integrity error. This may be a duplicate entry.'},
            status=status.HTTP_409_CONFLICT
        )

    if isinstance(exc, ValueError):
        return Response(
            {'error': str(exc)},
            status=status.HTTP_400_BAD_REQUEST
        )

    logger.exception(f"Unhandled exception: {exc}")

    return Response(
        {'error': 'An unexpected error occurred.'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
