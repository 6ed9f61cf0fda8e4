"""Security Headers Middleware

Adds security headers to responses of the storefront and dashboard API.

Disabled by default; enable with SECURITY_HEADERS_ENABLED=true when the API
is served to browsers directly rather than through a proxy that sets them.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import config


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all HTTP responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and add security headers to response.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response with security headers added
        """
        response = await call_next(request)

        if not config.SECURITY_HEADERS_ENABLED:
            return response

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # JSON only: nothing to load, nothing to embed
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        if config.HSTS_ENABLED:
            # 1 year
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
