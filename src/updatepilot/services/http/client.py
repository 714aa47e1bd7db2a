"""Blocking GET client for GitHub/GitLab REST APIs."""

import json
from contextlib import AbstractContextManager
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from updatepilot.exceptions import ApiDecodeError, ApiHttpError, ApiTransportError
from updatepilot.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiResponse(BaseModel):
    """A successful (HTTP 200) response."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str
    status_code: int
    headers: dict[str, str] = {}
    content: bytes = b""
    data: Any = None


class ApiClient:
    """
    Issues GET requests and maps failures to typed errors.

    Only HTTP 200 counts as success. Redirects are followed by the transport, so
    the status that is checked is the one of the final response. No retries are
    made here; callers decide what a failure means for them.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            timeout: Default per-request timeout in seconds
            user_agent: Value of the User-Agent header sent with every request
            transport: Optional httpx transport (tests pass an httpx.MockTransport)
        """
        self.timeout = timeout
        headers = {"User-Agent": user_agent} if user_agent else {}
        self._client = httpx.Client(follow_redirects=True, headers=headers, transport=transport)

    def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        decode_json: bool = True,
    ) -> ApiResponse:
        """
        Perform a GET request.

        Args:
            url: Absolute URL
            headers: Extra request headers
            timeout: Timeout in seconds, defaults to the client timeout
            decode_json: Parse the body as JSON into ApiResponse.data

        Returns:
            The response

        Raises:
            ApiTransportError: Connection, DNS or timeout failure
            ApiHttpError: Any status other than 200
            ApiDecodeError: Body is not valid JSON while decode_json is set
        """
        try:
            response = self._client.get(url, headers=headers or {}, timeout=timeout or self.timeout)
        except httpx.TransportError as e:
            logger.warning("API request failed", url=_redact(url), error=str(e))
            raise ApiTransportError(str(e) or type(e).__name__) from e

        if response.status_code != 200:
            logger.warning("API request returned error status", url=_redact(url), status=response.status_code)
            raise ApiHttpError(response.status_code)

        data = None
        if decode_json:
            try:
                data = response.json()
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ApiDecodeError(str(e)) from e

        return ApiResponse(
            url=str(response.url),
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
            data=data,
        )

    def stream(
        self, url: str, headers: dict[str, str] | None = None, timeout: float | None = None
    ) -> AbstractContextManager[httpx.Response]:
        """Open a streaming GET; used for archive downloads. The caller checks the status."""
        return self._client.stream("GET", url, headers=headers or {}, timeout=timeout or self.timeout)

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _redact(url: str) -> str:
    """Hide private_token query values before a URL is logged."""
    parsed = httpx.URL(url)
    if "private_token" not in parsed.params:
        return url
    return str(parsed.copy_set_param("private_token", "***"))
