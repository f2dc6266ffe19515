from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger(__name__)


class BusinessLogicException(Exception):
    """
    Raised when a domain rule is violated (e.g. 'Refund already processed for this order').

    Most rule violations are plain 400s; callers pass ``status_code`` for the few
    that map to 401/404/502.
    """
    def __init__(self, message, code="business_error", status_code=status.HTTP_400_BAD_REQUEST):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


def custom_exception_handler(exc, context):
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if isinstance(exc, BusinessLogicException):
        return Response(
            {"error": exc.message, "code": exc.code},
            status=exc.status_code,
        )

    # If response is None, it's an unhandled server error (500)
    if response is None:
        view = context.get("view")
        logger.error(
            f"Unhandled Exception in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
            exc_info=True,
        )
        return Response(
            {"error": "Internal Server Error", "code": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return response
