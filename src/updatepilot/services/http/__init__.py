"""HTTP access to source-control host APIs."""

from .client import DEFAULT_TIMEOUT, ApiClient, ApiResponse

__all__ = ["DEFAULT_TIMEOUT", "ApiClient", "ApiResponse"]
