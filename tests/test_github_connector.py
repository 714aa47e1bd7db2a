# ruff: noqa: ANN201, ANN001
import pytest
from conftest import NOW

from updatepilot.models.config import HostsConfig
from updatepilot.models.connector import ConnectorRecord, ConnectorType
from updatepilot.services.connectors import GithubConnector, create_connector

NOT_FOUND = "Resource not found (check repository name, branch/tag/commit name)"


@pytest.fixture
def connector(api_client, clock):
    return GithubConnector(owner="acme", client=api_client, clock=clock)


def rate_limit(remaining, reset, limit=60):
    return {"resources": {"core": {"limit": limit, "remaining": remaining, "reset": reset}}}


def test_resolve_url_needs_no_network(connector, fake_host):
    assert connector.resolve_url("widget") == "https://github.com/acme/widget"
    assert fake_host.requests == []


def test_resolve_url_uses_configured_host(api_client):
    connector = GithubConnector(owner="acme", client=api_client, hosts=HostsConfig(github_url="https://ghe.test/"))
    assert connector.resolve_url("widget") == "https://ghe.test/acme/widget"


def test_token_goes_into_authorization_header(api_client, fake_host, clock):
    connector = GithubConnector(owner="acme", token="s3cret", client=api_client, clock=clock)
    fake_host.add("/commits", json=[{"sha": "abc123"}])
    fake_host.add("/rate_limit", json=rate_limit(50, NOW + 3600))

    connector.resolve_latest_commit("widget")

    request = fake_host.requests[0]
    assert request.headers["Authorization"] == "token s3cret"
    assert request.headers["Accept"] == "application/vnd.github.v3.full+json"
    assert "s3cret" not in str(request.url)


def test_latest_commit_with_quota_left(connector, fake_host):
    fake_host.add("/commits", json=[{"sha": "abc123"}, {"sha": "older"}])
    fake_host.add("/rate_limit", json=rate_limit(50, NOW + 3600))

    assert connector.resolve_latest_commit("widget", "main") == "abc123"
    assert fake_host.urls()[0] == "https://api.github.com/repos/acme/widget/commits?sha=main"
    assert "50" in connector.warning
    assert "1 hour" in connector.warning
    assert connector.error == ""


def test_latest_commit_discarded_when_quota_exhausted(connector, fake_host):
    fake_host.add("/commits", json=[{"sha": "abc123"}])
    fake_host.add("/rate_limit", json=rate_limit(1, NOW + 120))

    assert connector.resolve_latest_commit("widget") is None
    assert "2 mins" in connector.error
    assert connector.warning == ""


def test_latest_tag_discarded_when_quota_exhausted(connector, fake_host):
    fake_host.add("/tags", json=[{"name": "v2.0.0"}])
    fake_host.add("/rate_limit", json=rate_limit(0, NOW + 7200))

    assert connector.resolve_latest_tag("widget") is None
    assert "2 hours" in connector.error


def test_rate_limit_checked_on_every_call(connector, fake_host):
    fake_host.add("/tags", json=[{"name": "v1.0.0"}])
    fake_host.add("/rate_limit", json=rate_limit(40, NOW + 60))

    connector.resolve_latest_tag("widget")
    connector.resolve_latest_tag("widget")

    assert sum("/rate_limit" in url for url in fake_host.urls()) == 2


def test_http_error_sets_fixed_message(connector, fake_host):
    fake_host.add("/commits", status=404, json={"message": "Not Found"})

    assert connector.resolve_latest_commit("widget") is None
    assert connector.error == NOT_FOUND
    assert not any("/rate_limit" in url for url in fake_host.urls())


def test_empty_list_is_not_an_error(connector, fake_host):
    fake_host.add("/tags", json=[])
    fake_host.add("/rate_limit", json=rate_limit(0, NOW + 1800))

    assert connector.resolve_latest_tag("widget") is None
    assert connector.error == ""
    assert not any("/rate_limit" in url for url in fake_host.urls())


def test_failed_rate_limit_query_drops_value(connector, fake_host):
    fake_host.add("/zipball/", content=b"PK\x03\x04")
    fake_host.add("/rate_limit", status=500)

    assert connector.resolve_download_reference("widget", "v1.0.0") is None
    assert connector.error == "HTTP error 500"


def test_tags_are_not_sorted(connector, fake_host):
    fake_host.add("/tags", json=[{"name": "v1.0.0"}, {"name": "v3.0.0"}, {"name": "v2.0.0"}])
    fake_host.add("/rate_limit", json=rate_limit(55, NOW + 1800))

    assert connector.resolve_latest_tag("widget") == "v1.0.0"


def test_diagnostics_reset_between_calls(connector, fake_host):
    fake_host.add("/commits", status=401)
    fake_host.add("/tags", json=[{"name": "v1.0.0"}])
    fake_host.add("/rate_limit", json=rate_limit(55, NOW + 1800))

    connector.resolve_latest_commit("widget")
    assert connector.error != ""

    assert connector.resolve_latest_tag("widget") == "v1.0.0"
    assert connector.error == ""


def test_download_reference_is_checked(connector, fake_host):
    fake_host.add("/zipball/", content=b"PK\x03\x04")
    fake_host.add("/rate_limit", json=rate_limit(55, NOW + 1800))

    url = connector.resolve_download_reference("widget", "v1.0.0")

    assert url == "https://api.github.com/repos/acme/widget/zipball/v1.0.0"
    assert fake_host.urls()[0] == url


def test_download_reference_missing_ref(connector, fake_host):
    fake_host.add("/zipball/", status=404)

    assert connector.resolve_download_reference("widget", "nope") is None
    assert connector.error == NOT_FOUND


def test_record_round_trip(api_client):
    connector = GithubConnector(owner="acme", token="t", client=api_client)
    record = connector.to_record()

    assert record.type is ConnectorType.GITHUB
    assert record.display == "GitHub.com"

    rebuilt = create_connector(record.model_dump(mode="json"), client=api_client)
    assert isinstance(rebuilt, GithubConnector)
    assert rebuilt.id == connector.id
    assert rebuilt.owner == "acme"
    assert rebuilt.token == "t"


def test_create_connector_from_model(api_client):
    record = ConnectorRecord(type=ConnectorType.GITHUB, id="c1", owner=" acme ", token=None)  # type: ignore[arg-type]
    connector = create_connector(record, client=api_client)

    assert connector.owner == "acme"
    assert connector.token == ""
