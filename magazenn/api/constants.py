"""API-related constants."""

# HTTP Status Codes
HTTP_500_INTERNAL_SERVER_ERROR = 500

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Category resource
CATEGORIES_PATH = "/api/categories"
HELLO_MESSAGE = "Hello Category Resource"
PING_CHECK_NAME = "Ping Category REST Endpoint"

# Request logging
MAX_USER_AGENT_LENGTH = 200
