"""Centralized exception hierarchy for UpdatePilot.

Supports i18n keys for user-facing messages and English for internal logging.
"""


class AppBaseError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        i18n_key: str,
        status_code: int = 500,
        retriable: bool = False,
        **params: object,
    ) -> None:
        """
        Initialize the error.

        Args:
            i18n_key: Dot-path in i18n.json (e.g., 'extension.not_found')
            status_code: Recommended HTTP status code
            retriable: Whether the operation can be retried
            **params: Parameters for string formatting in translations
        """
        super().__init__(i18n_key)
        self.i18n_key = i18n_key
        self.status_code = status_code
        self.retriable = retriable
        self.params = params

    def __str__(self) -> str:
        """Returns the English version of the error message for logging."""
        try:
            # Lazy import to avoid circular dependencies
            from updatepilot.services.i18n import get_i18n_service

            i18n = get_i18n_service()

            # Use dot-path as default if translation fails
            translated = i18n.translate(self.i18n_key, lang="en", **self.params)
            return str(translated) if translated else self.i18n_key
        except Exception:
            # Fallback if i18n service is not available or fails
            params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
            return f"[{self.i18n_key}] {params_str} (retriable: {self.retriable})"


class ResourceNotFoundError(AppBaseError):
    """Raised when a requested resource (connector, plugin, theme) is not found."""

    def __init__(self, i18n_key: str, **params: object) -> None:
        super().__init__(i18n_key, status_code=404, **params)


class ResourceConflictError(AppBaseError):
    """Raised when an operation conflicts with the current state (e.g., duplicate repository)."""

    def __init__(self, i18n_key: str, **params: object) -> None:
        super().__init__(i18n_key, status_code=409, **params)


class ValidationError(AppBaseError):
    """Raised when input validation fails."""

    def __init__(self, i18n_key: str, **params: object) -> None:
        super().__init__(i18n_key, status_code=400, **params)


class OperationalError(AppBaseError):
    """Raised when an operational failure occurs (remote API, archive install, etc.)."""

    def __init__(self, i18n_key: str, retriable: bool = False, **params: object) -> None:
        super().__init__(i18n_key, status_code=500, retriable=retriable, **params)


class ApiError(OperationalError):
    """Raised by the HTTP API client when a host request does not yield a usable response."""


class ApiTransportError(ApiError):
    """DNS, connect or timeout failure before any HTTP status was received."""

    def __init__(self, error: str) -> None:
        super().__init__("api.transport_failed", retriable=True, error=error)


class ApiHttpError(ApiError):
    """The host answered with a status other than 200."""

    KNOWN_STATUSES = (401, 403, 404, 429)

    def __init__(self, status: int) -> None:
        key = f"api.http_error.{status}" if status in self.KNOWN_STATUSES else "api.http_error.other"
        super().__init__(key, retriable=status == 429, status=status)
        self.status = status


class ApiDecodeError(ApiError):
    """The response body was expected to be JSON but could not be parsed."""

    def __init__(self, error: str) -> None:
        super().__init__("api.decode_failed", error=error)
