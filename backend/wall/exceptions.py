"""
Error taxonomy for the wall engine + custom exception handler for DRF.

Every failure the service layer raises is a WallError subclass carrying the
HTTP status the request layer should use and the ids involved, so a handler
can render a useful message without parsing strings.

    NotFound          referenced post/comment/user absent           -> 404
    Forbidden         visibility or ownership denial                -> 403
    ValidationFailed  bad content/text length, bad wall, bad code   -> 400
    Conflict          counter CAS retries exhausted, duplicate rows -> 409
"""
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.db import IntegrityError
import logging

logger = logging.getLogger(__name__)


class WallError(Exception):
    """Base class for all wall engine failures."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request failed.'

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class NotFound(WallError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'


class Forbidden(WallError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have access to this resource.'


class ValidationFailed(WallError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid input.'


class Conflict(WallError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'The resource was modified concurrently. Please retry.'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that:
    1. Maps WallError kinds to their status codes
    2. Converts Django exceptions to DRF responses
    3. Provides consistent {'error': ...} format
    """
    if isinstance(exc, WallError):
        if isinstance(exc, Conflict):
            logger.warning("Conflict: %s %s", exc.message, exc.context)
        return Response({'error': exc.message}, status=exc.status_code)

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    # If DRF handled it, enhance the response
    if response is not None:
        if not isinstance(response.data, dict) or 'error' not in response.data:
            response.data = {
                'error': str(exc),
                'details': response.data
            }
        return response

    if isinstance(exc, IntegrityError):
        logger.warning("IntegrityError: %s", exc)
        return Response(
            {'error': 'Data integrity error. This may be a duplicate entry.'},
            status=status.HTTP_409_CONFLICT
        )

    logger.exception("Unhandled exception: %s", exc)

    return Response(
        {'error': 'An unexpected error occurred.'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
