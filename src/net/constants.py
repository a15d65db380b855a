"""HTTP constants for the request orchestration layer.

Centralizes status codes, messages and defaults shared across modules.
"""

# HTTP Status Codes
HTTP_STATUS_OK = 200
HTTP_STATUS_UNAUTHORIZED = 401

# Synthetic status for "no response" and "timed out"
HTTP_STATUS_NO_RESPONSE = 444

# Defaults
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_ORIGIN = "http://localhost"
DEFAULT_METHOD = "POST"
DEFAULT_MODE = "cors"
DEFAULT_CREDENTIALS = "include"
DEFAULT_RETRIES = 1

# User-facing messages
MESSAGE_TIMED_OUT = "Request timed out, please retry"
MESSAGE_COMMUNICATION_FAILED = "Could Not Communicate With Server"
MESSAGE_OPERATION_FAILED = "Cannot complete operation"

SEVERITY_ERROR = "error"

JSON_CONTENT_TYPE = "application/json"

# Log component name
COMPONENT_NET = "net"
