"""Cross-cutting functionality shared by every layer of the service.

- **config**: Settings loaded from the environment
- **context**: Request correlation IDs
- **exceptions**: Error hierarchy mapped to HTTP responses
- **error_context**: Redaction of sensitive values before logging
- **logging**: Loguru setup
- **observability**: OpenTelemetry tracing
"""
