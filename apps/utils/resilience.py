import functools
import logging
from django.core.cache import cache
from rest_framework import status
from apps.utils.exceptions import BusinessLogicException

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """
    Stops calling a flaky upstream (payment gateway) for ``recovery_timeout``
    seconds after ``failure_threshold`` errors inside ``window`` seconds.

    Domain errors (BusinessLogicException) do not count as failures.
    """
    def __init__(self, service_name, failure_threshold=5, recovery_timeout=60, window=120):
        self.service_name = service_name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.window = window
        self.cache_key_failures = f"cb_failures:{service_name}"
        self.cache_key_open = f"cb_open:{service_name}"

    def __call__(self, func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if cache.get(self.cache_key_open):
                raise BusinessLogicException(
                    f"{self.service_name} is temporarily unavailable. Please try again later.",
                    code="service_unavailable",
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                )

            try:
                return func(*args, **kwargs)
            except BusinessLogicException:
                raise
            except Exception:
                self.record_failure()
                raise

        return wrapper

    def record_failure(self):
        # add() starts the window; incr() keeps its TTL
        cache.add(self.cache_key_failures, 0, timeout=self.window)
        try:
            failures = cache.incr(self.cache_key_failures)
        except ValueError:
            # key expired between add() and incr()
            cache.set(self.cache_key_failures, 1, timeout=self.window)
            failures = 1

        if failures >= self.failure_threshold:
            logger.warning(f"Circuit opened for {self.service_name} after {failures} failures")
            cache.set(self.cache_key_open, "OPEN", timeout=self.recovery_timeout)
            cache.delete(self.cache_key_failures)
