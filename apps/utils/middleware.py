import logging
import time
from django.utils.deprecation import MiddlewareMixin
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class GlobalExceptionMiddleware(MiddlewareMixin):
    """
    Last line of defense for non-DRF views.
    """
    def process_exception(self, request, exception):
        logger.exception(f"Unhandled Middleware Exception: {exception}")
        if request.path.startswith('/api/'):
            return JsonResponse(
                {"error": "Internal Server Error", "code": "server_error"},
                status=500
            )
        return None


class RequestLogMiddleware(MiddlewareMixin):
    """
    One access-log line per API call with status and latency.
    """
    def process_request(self, request):
        request._started_at = time.monotonic()

    def process_response(self, request, response):
        started = getattr(request, "_started_at", None)
        if started is not None and request.path.startswith('/api/'):
            elapsed_ms = (time.monotonic() - started) * 1000
            user = getattr(request, "user", None)
            logger.info(
                "%s %s -> %s (%.1fms)",
                request.method,
                request.path,
                response.status_code,
                elapsed_ms,
                extra={"user_id": getattr(user, "pk", None)},
            )
        return response
