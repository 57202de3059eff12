"""
Request Logger and Metrics

FLOW OVERVIEW
- log_api_request(method, path, status_code, duration_ms)
  • Readable one-line summary of each handled API request, plus Prometheus observation.

- ai_call(operation, success, duration_ms, error)
  • Info line on success, error line (with traceback) on failure.

- database_operation(operation, table, success, duration_ms, error)
  • Debug line on success, error line on failure.

- register_request_logging(app)
  • before/after_request hooks that time every request, emit the summary line
    and attach the security headers to the response.
"""

import time
import logging
from typing import Optional
from flask import request, g
from .prom_metrics import observe_request


SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'camera=(), microphone=(), geolocation=()',
}


class RequestLogger:
    """Structured log lines for API requests, AI calls and database operations."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def log_api_request(self, method: str, path: str, status_code: int,
                        duration_ms: int, endpoint: Optional[str] = None) -> None:
        self.logger.info(f"API Request {method} {path} -> {status_code} ({duration_ms}ms)")
        observe_request(endpoint or path, status_code, duration_ms / 1000.0)

    def ai_call(self, operation: str, success: bool, duration_ms: int,
                error: Optional[BaseException] = None) -> None:
        if success:
            self.logger.info(f"AI Call Success: {operation} ({duration_ms}ms)")
        else:
            self.logger.error(f"AI Call Failed: {operation} ({duration_ms}ms): {error}",
                              exc_info=error)

    def database_operation(self, operation: str, table: str, success: bool = True,
                           duration_ms: int = 0, error: Optional[BaseException] = None) -> None:
        if success:
            self.logger.debug(f"Database Operation: {operation} {table} ({duration_ms}ms)")
        else:
            self.logger.error(f"Database Operation Failed: {operation} {table} ({duration_ms}ms): {error}",
                              exc_info=error)


def register_request_logging(app):
    """Time each request, log its outcome and apply security headers"""

    @app.before_request
    def start_timer():
        g.request_started_at = time.time()

    @app.after_request
    def log_and_secure(response):
        started_at = g.pop('request_started_at', None)
        if started_at is not None and request.path.startswith('/api'):
            duration_ms = int((time.time() - started_at) * 1000)
            request_logger.log_api_request(request.method, request.path,
                                           response.status_code, duration_ms,
                                           endpoint=request.endpoint)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


# Global instance
request_logger = RequestLogger()
