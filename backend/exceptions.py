"""
Service-layer exceptions and the DRF handler that turns them into responses.

Services raise these; views let them propagate so every endpoint reports the
same {"error": message} body with a matching status code.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None):
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class NotFound(ServiceError):
    """Entity id does not resolve."""
    status_code = status.HTTP_404_NOT_FOUND


class Unauthorized(ServiceError):
    """Caller does not own or role-match the targeted resource."""
    status_code = status.HTTP_403_FORBIDDEN


class InvalidInput(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class QuotaExceeded(ServiceError):
    """Attempt cap for an assignment has been reached."""
    status_code = status.HTTP_400_BAD_REQUEST


AttemptsExceeded = QuotaExceeded


def service_exception_handler(exc, context):
    if isinstance(exc, ServiceError):
        view = context.get('view')
        logger.warning(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        return Response({'error': exc.message}, status=exc.status_code)

    return exception_handler(exc, context)
