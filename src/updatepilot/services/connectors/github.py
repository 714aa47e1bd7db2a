"""GitHub connector."""

from urllib.parse import quote, urlencode

from updatepilot.logger import get_logger
from updatepilot.models.connector import ConnectorType
from updatepilot.services.http import ApiResponse
from updatepilot.services.i18n import get_i18n_service
from updatepilot.utils.timefmt import human_time_diff

from .base import Connector

logger = get_logger(__name__)


class GithubConnector(Connector):
    """
    Connector for github.com repositories.

    Every commit or tag lookup that finds something, and every archive
    lookup that succeeds, is followed by a query of the rate-limit endpoint.
    That query is not cached, so it always reflects the current quota.
    """

    type = ConnectorType.GITHUB
    display_name = "GitHub.com"

    def resolve_url(self, repository: str) -> str:
        return f"{self.hosts.github_url}/{self.owner}/{repository}"

    def request_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3.full+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def _repo_api(self, repository: str, path: str) -> str:
        return f"{self.hosts.github_api_url}/repos/{quote(self.owner)}/{quote(repository)}/{path}"

    def resolve_latest_commit(self, repository: str, branch: str = "main") -> str | None:
        self._reset_diagnostics()
        url = self._repo_api(repository, "commits") + "?" + urlencode({"sha": branch})
        response = self._api(url, headers=self.request_headers())
        return self._unless_rate_limited(response, self._first_value(response, "sha"))

    def resolve_latest_tag(self, repository: str) -> str | None:
        self._reset_diagnostics()
        response = self._api(self._repo_api(repository, "tags"), headers=self.request_headers())
        return self._unless_rate_limited(response, self._first_value(response, "name"))

    def resolve_download_reference(self, repository: str, ref: str) -> str | None:
        self._reset_diagnostics()
        url = self._repo_api(repository, f"zipball/{quote(ref, safe='/')}")
        response = self._api(url, headers=self.request_headers(), decode_json=False)
        return self._unless_rate_limited(response, url)

    def _unless_rate_limited(self, response: ApiResponse | None, value: str | None) -> str | None:
        """
        Drop ``value`` when the listing failed or the quota is exhausted.

        An empty listing is a plain "not found" and skips the quota query. A
        failing quota query also drops the value.
        """
        if response is None or value is None:
            return None
        if self.is_rate_limit_reached() or self.error:
            return None
        return value

    def is_rate_limit_reached(self) -> bool:
        """
        Query the core API quota.

        Sets ``warning`` with the remaining quota while more than one request
        is left. Once the quota is exhausted sets ``error`` with the time until
        it resets and returns True.
        """
        response = self._api(f"{self.hosts.github_api_url}/rate_limit", headers=self.request_headers())
        core = {}
        if response is not None and isinstance(response.data, dict):
            core = (response.data.get("resources") or {}).get("core") or {}

        remaining = core.get("remaining")
        reset = core.get("reset")
        i18n = get_i18n_service()

        if remaining is not None and remaining > 1:
            self.warning = i18n.translate(
                "github.rate_limit.remaining",
                limit=core.get("limit"),
                remaining=remaining,
                reset=human_time_diff(reset or self.clock(), self.clock()),
            )
            return False

        if reset is not None:
            self.error = i18n.translate("github.rate_limit.reached", reset=human_time_diff(reset, self.clock()))
            logger.warning("GitHub API rate limit reached", connector=self.id, reset=reset)
            return True

        return False
