"""Middleware and exception handlers applied to every request.

- **RequestContextMiddleware**: correlation id per request, echoed in responses
- **RequestLoggingMiddleware**: start/completion logs with timing
- **error_handler**: maps every exception to an ``ErrorResponse`` body

Request context is registered last so it runs first and the logging
middleware already sees the correlation id.
"""
