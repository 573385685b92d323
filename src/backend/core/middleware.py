"""
Security headers middleware.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses.

    JSON API responses get a locked-down Content-Security-Policy and are never
    cached. Admin panel pages are HTML with inline styles and scripts, so they
    get a same-origin policy instead.
    """

    API_CSP = "default-src 'none'; frame-ancestors 'none'"
    ADMIN_CSP = (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "script-src 'self' 'unsafe-inline'; frame-ancestors 'none'"
    )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add security headers to response."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "accelerometer=(), camera=(), geolocation=(), gyroscope=(), "
            "magnetometer=(), microphone=(), payment=(), usb=()"
        )

        if request.url.path.startswith("/admin"):
            response.headers["Content-Security-Policy"] = self.ADMIN_CSP
        else:
            response.headers["Content-Security-Policy"] = self.API_CSP

        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"

        return response
