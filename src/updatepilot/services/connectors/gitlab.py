"""GitLab connector."""

from urllib.parse import quote, urlencode

from updatepilot.models.connector import ConnectorType

from .base import Connector


class GitlabConnector(Connector):
    """
    Connector for a GitLab instance.

    The token travels as the ``private_token`` query parameter rather than a
    header, and no rate-limit probing is done.
    """

    type = ConnectorType.GITLAB
    display_name = "GitLab"

    def resolve_url(self, repository: str) -> str:
        return f"{self.hosts.gitlab_url}/{self.owner}/{repository}"

    def _project_api(self, repository: str, path: str, params: dict[str, str] | None = None) -> str:
        project = quote(f"{self.owner}/{repository}", safe="")
        url = f"{self.hosts.gitlab_url}/api/v4/projects/{project}/repository/{path}"
        query = dict(params or {})
        if self.token:
            query["private_token"] = self.token
        return f"{url}?{urlencode(query)}" if query else url

    def resolve_latest_commit(self, repository: str, branch: str = "main") -> str | None:
        self._reset_diagnostics()
        response = self._api(self._project_api(repository, "commits", {"ref_name": branch}))
        return self._first_value(response, "id")

    def resolve_latest_tag(self, repository: str) -> str | None:
        self._reset_diagnostics()
        response = self._api(self._project_api(repository, "tags"))
        return self._first_value(response, "name")

    def resolve_download_reference(self, repository: str, ref: str) -> str | None:
        self._reset_diagnostics()
        url = self._project_api(repository, "archive.zip", {"sha": ref})
        if self._api(url, decode_json=False) is None:
            return None
        return url
