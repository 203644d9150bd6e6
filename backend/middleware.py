import traceback
import logging
from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class RequestErrorLoggingMiddleware:
    """
    Log unhandled exceptions with the request path and method.

    With DEBUG on, the error is returned as JSON so API clients see the
    message instead of Django's HTML page.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        logger.error(f"500 Error on {request.method} {request.path}: {exception}")
        logger.error(f"Traceback: {traceback.format_exc()}")

        if not settings.DEBUG:
            return None

        return JsonResponse({
            "error": "Internal Server Error",
            "message": str(exception),
            "path": request.path,
        }, status=500)
