"""
Common Error Constants

Centralized error messages shared by the storage layer and the API client.
"""

from typing import Optional

# Storage errors
ERROR_STORAGE_UNAVAILABLE = "Cart storage unavailable"
ERROR_STORAGE_CORRUPTED = "Stored cart payload is malformed"
ERROR_REDIS_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"

# Remote API errors
ERROR_API_UNREACHABLE = "Failed to connect to cart API"
ERROR_API_INVALID_RESPONSE = "Invalid response from cart API"


class ApiError(Exception):
    """Raised by the remote API client for HTTP and network failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status {self.status_code})"
        return self.message
