# ruff: noqa: ANN201, ANN001, ANN204
import httpx
import pytest

from updatepilot.models.connector import ConnectorType
from updatepilot.services.connectors import Connector
from updatepilot.services.http import ApiClient

NOW = 1_700_000_000


class FakeHost:
    """
    Routes requests to canned responses.

    A route matches when its key is a substring of the full request URL; the
    first route added wins. Unmatched requests get a 404.
    """

    def __init__(self):
        self.routes: list[tuple[str, object]] = []
        self.requests: list[httpx.Request] = []

    def add(self, key, status=200, json=None, content=b"", headers=None):
        self.routes.append((key, (status, json, content, headers or {})))

    def raise_on(self, key, exc):
        self.routes.append((key, exc))

    def urls(self):
        return [str(r.url) for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        for key, route in self.routes:
            if key not in url:
                continue
            if isinstance(route, Exception):
                raise route
            status, json, content, headers = route
            if json is not None:
                return httpx.Response(status, json=json, headers=headers)
            return httpx.Response(status, content=content, headers=headers)
        return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def api_client(fake_host):
    client = ApiClient(transport=httpx.MockTransport(fake_host.handler))
    yield client
    client.close()


@pytest.fixture
def clock():
    return lambda: float(NOW)


class StubConnector(Connector):
    """Returns canned values and diagnostics."""

    type = ConnectorType.GITHUB
    display_name = "Stub"

    def __init__(self, commit=None, tag=None, warning="", error="", connector_id="stub"):
        super().__init__(owner="acme", connector_id=connector_id)
        self.commit = commit
        self.tag = tag
        self.next_warning = warning
        self.next_error = error
        self.calls = []

    def resolve_url(self, repository):
        return f"https://example.test/acme/{repository}"

    def _resolve(self, value):
        self.warning = self.next_warning
        self.error = self.next_error
        return value

    def resolve_latest_commit(self, repository, branch="main"):
        self.calls.append(("commit", repository, branch))
        return self._resolve(self.commit)

    def resolve_latest_tag(self, repository):
        self.calls.append(("tag", repository))
        return self._resolve(self.tag)

    def resolve_download_reference(self, repository, ref):
        self.calls.append(("download", repository, ref))
        url = self._resolve(f"https://example.test/{repository}/{ref}.zip")
        return None if self.error else url


class FakeInspector:
    def __init__(self, plugins=(), themes=()):
        self.plugins = set(plugins)
        self.themes = set(themes)
        self.versions = {}

    def list_installed_plugin_folders(self):
        return self.plugins

    def list_installed_theme_folders(self):
        return self.themes

    def get_installed_version(self, kind, folder):
        return self.versions.get((kind, folder))


class FakeInstaller:
    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def install(self, url, kind, folder, headers=None):
        self.calls.append((url, kind, folder))
        return self.result
