"""
Custom middleware for marketplace activity logging.
"""
import logging
import re
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger('security')


class TradeActivityLoggingMiddleware(MiddlewareMixin):
    """
    Middleware to log state-changing marketplace requests.
    Successful writes are logged at INFO, rejected ones at WARNING.
    """

    # Paths that should be logged
    MONITORED_PATHS = [
        re.compile(r'^/api/users$'),
        re.compile(r'^/api/users/[^/]+/requisites$'),
        re.compile(r'^/api/orders$'),
        re.compile(r'^/api/orders/[^/]+/join$'),
        re.compile(r'^/api/orders/[^/]+/status$'),
    ]

    MUTATING_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')

    def process_response(self, request, response):
        if request.method not in self.MUTATING_METHODS:
            return response

        # Only log monitored paths
        if not any(pattern.match(request.path) for pattern in self.MONITORED_PATHS):
            return response

        message = (
            f"{request.method} {request.path} -> {response.status_code} "
            f"from IP {self.get_client_ip(request)}"
        )
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)

        return response

    @staticmethod
    def get_client_ip(request):
        """Extract client IP from request."""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            ip = x_forwarded_for.split(',')[0]
        else:
            ip = request.META.get('REMOTE_ADDR')
        return ip
