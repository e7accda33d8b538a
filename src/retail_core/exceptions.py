"""Domain-specific exceptions for retail_core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from RetailAPIError for easy catching.

The aggregation pipeline itself never raises: malformed values degrade to
zero. These exceptions cover configuration and the REST boundary.
"""

from __future__ import annotations


class RetailAPIError(Exception):
    """Base exception for all retail_core errors.

    Users can catch this exception to handle any retail_core error.
    """

    pass


class ConfigError(RetailAPIError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - A store topology file cannot be loaded or parsed
    - Lookup tables would make store normalization non-idempotent
    - Required settings (e.g. the API base URL) are missing
    """

    pass


class DataQualityError(RetailAPIError):
    """Raised when a report payload does not have the expected shape."""

    pass


class FetchError(RetailAPIError):
    """Raised when a report request to the backend fails.

    This exception is raised when:
    - The network connection to the reporting API fails
    - The API answers with a non-2xx status
    - The response body is not valid JSON

    Attributes:
        status_code: HTTP status of the failed response, or None for
            network-level failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
