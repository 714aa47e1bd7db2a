"""Common behaviour of source-control host connectors."""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from updatepilot.exceptions import ApiError
from updatepilot.logger import get_logger
from updatepilot.models.config import HostsConfig
from updatepilot.models.connector import ConnectorRecord, ConnectorType
from updatepilot.services.http import ApiClient, ApiResponse
from updatepilot.utils.ids import generate_id

logger = get_logger(__name__)


class Connector(ABC):
    """
    Gateway to one source-control host account (user, group or namespace).

    Resolution methods never raise for remote problems. They return None and
    leave a message in ``error``; ``warning`` carries non-fatal notices such as
    the remaining API quota. Both are reset at the start of every resolution
    call, so they always describe the most recent call only.
    """

    type: ClassVar[ConnectorType]
    display_name: ClassVar[str]

    def __init__(
        self,
        owner: str,
        token: str = "",
        connector_id: str | None = None,
        client: ApiClient | None = None,
        hosts: HostsConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the connector.

        Args:
            owner: Account, group or namespace on the host
            token: Optional access token
            connector_id: Existing id; a new one is generated when omitted
            client: Shared API client
            hosts: Host base URLs
            clock: Source of the current Unix time
        """
        self._id = connector_id or generate_id()
        self.owner = owner
        self.token = token or ""
        self.client = client or ApiClient()
        self.hosts = hosts or HostsConfig()
        self.clock = clock
        self.warning = ""
        self.error = ""

    @property
    def id(self) -> str:
        """Stable identity; never changes after creation."""
        return self._id

    @property
    def display(self) -> str:
        return self.display_name

    @classmethod
    def from_record(cls, record: ConnectorRecord, **kwargs: Any) -> "Connector":
        """Build a connector from its persisted form."""
        return cls(owner=record.owner, token=record.token, connector_id=record.id, **kwargs)

    def to_record(self) -> ConnectorRecord:
        """Persisted form of this connector."""
        return ConnectorRecord(type=self.type, id=self.id, display=self.display, owner=self.owner, token=self.token)

    @abstractmethod
    def resolve_url(self, repository: str) -> str:
        """Web URL of a repository. No network access."""

    @abstractmethod
    def resolve_latest_commit(self, repository: str, branch: str = "main") -> str | None:
        """Id of the most recent commit on a branch, or None."""

    @abstractmethod
    def resolve_latest_tag(self, repository: str) -> str | None:
        """
        Name of the first tag the host lists, or None.

        Hosts list tags newest first; the order is trusted as returned and not
        re-sorted here.
        """

    @abstractmethod
    def resolve_download_reference(self, repository: str, ref: str) -> str | None:
        """URL of a snapshot archive for a commit, tag or branch, or None."""

    def request_headers(self) -> dict[str, str]:
        """Headers needed to fetch URLs produced by this connector."""
        return {}

    def _reset_diagnostics(self) -> None:
        self.warning = ""
        self.error = ""

    def _api(self, url: str, headers: dict[str, str] | None = None, decode_json: bool = True) -> ApiResponse | None:
        """GET through the API client, turning failures into ``error``."""
        try:
            return self.client.get(url, headers=headers, decode_json=decode_json)
        except ApiError as e:
            self.error = str(e)
            logger.warning(
                "Connector request failed",
                connector=self.id,
                type=self.type.value,
                error=self.error,
            )
            return None

    @staticmethod
    def _first_value(response: ApiResponse | None, key: str) -> str | None:
        """Value of ``key`` in the first element of a JSON list response."""
        if response is None or not isinstance(response.data, list) or not response.data:
            return None
        first = response.data[0]
        if not isinstance(first, dict) or not first.get(key):
            return None
        return str(first[key])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, owner={self.owner!r})"
