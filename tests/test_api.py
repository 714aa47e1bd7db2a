# ruff: noqa: ANN201, ANN001
import threading
import time

import pytest
from conftest import NOW, FakeInspector, FakeInstaller
from fastapi.testclient import TestClient

from updatepilot.main import create_app
from updatepilot.models.config import AppConfig, PathsConfig, SchedulerConfig, UIConfig


def rate_limit(remaining):
    return {"resources": {"core": {"limit": 60, "remaining": remaining, "reset": NOW + 3600}}}


@pytest.fixture
def inspector():
    return FakeInspector(plugins={"widget"}, themes={"skin"})


@pytest.fixture
def installer():
    return FakeInstaller()


@pytest.fixture
def config(tmp_path):
    return AppConfig(paths=PathsConfig(data_dir=tmp_path), scheduler=SchedulerConfig(enabled=False))


@pytest.fixture
def client(config, api_client, installer, inspector):
    app = create_app(config, client=api_client, installer=installer, inspector=inspector)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def github_host(fake_host):
    fake_host.add("/tags", json=[{"name": "v1.0.0"}])
    fake_host.add("/commits", json=[{"sha": "abc1234567890"}])
    fake_host.add("/zipball/", content=b"PK")
    fake_host.add("/rate_limit", json=rate_limit(50))
    return fake_host


def create_connector(client, owner="acme", token=""):
    res = client.post("/api/connectors", json={"type": "github", "owner": owner, "token": token})
    assert res.status_code == 201
    return res.json()


def create_plugin(client, connector_id, repository="widget", updates="tags"):
    res = client.post(
        "/api/extensions/plugin",
        json={"connector_id": connector_id, "repository": repository, "updates": updates},
    )
    assert res.status_code == 201, res.text
    return res.json()


def test_hello(client):
    res = client.get("/api/hello")
    assert res.status_code == 200
    assert res.json()["version"] == "0.1.0"


def test_connector_lifecycle(client):
    created = create_connector(client, token="secret")
    assert created["display"] == "GitHub.com"
    assert created["has_token"] is True
    assert "token" not in created

    res = client.put(f"/api/connectors/{created['id']}", json={"token": ""})
    assert res.status_code == 200
    assert res.json()["has_token"] is False

    res = client.get("/api/connectors")
    assert [c["id"] for c in res.json()] == [created["id"]]

    res = client.delete(f"/api/connectors/{created['id']}")
    assert res.json() == {"success": True}
    assert client.get("/api/connectors").json() == []


def test_connector_owner_required(client):
    res = client.post("/api/connectors", json={"type": "github", "owner": " "})

    assert res.status_code == 400
    assert res.json() == {
        "detail": "The User/Group field must not be empty.",
        "code": "connector.owner_required",
        "retriable": False,
    }


def test_unknown_connector_type(client):
    res = client.post("/api/connectors", json={"type": "bitbucket", "owner": "acme"})
    assert res.status_code == 422


def test_add_plugin_and_check(client, github_host, installer):
    connector = create_connector(client)

    plugin = create_plugin(client, connector["id"])

    assert plugin["remote_version"] == "v1.0.0"
    assert plugin["local_version"] == "v1.0.0"
    assert plugin["state"] == "checked-warning"
    assert "50 left" in plugin["last_warning"]
    assert plugin["url"] == "https://github.com/acme/widget"
    assert installer.calls[0][0] == "https://api.github.com/repos/acme/widget/zipball/v1.0.0"

    res = client.post(f"/api/extensions/plugin/{plugin['id']}/check")
    assert res.status_code == 200
    assert res.json()["last_checked"] > 0
    assert res.json()["last_checked_ago"] is not None

    res = client.get(f"/api/extensions/plugin/{plugin['id']}")
    assert res.json()["id"] == plugin["id"]


def test_connector_in_use_conflict(client, github_host):
    connector = create_connector(client)
    create_plugin(client, connector["id"])

    res = client.delete(f"/api/connectors/{connector['id']}")

    assert res.status_code == 409
    assert res.json()["code"] == "connector.in_use"

    res = client.get(f"/api/connectors/{connector['id']}/repositories")
    assert [r["repository"] for r in res.json()] == ["widget"]


def test_rate_limit_reached_reports_error(client, fake_host):
    fake_host.add("/tags", json=[{"name": "v1.0.0"}])
    fake_host.add("/rate_limit", json=rate_limit(1))
    connector = create_connector(client)

    res = client.post(
        "/api/extensions/plugin",
        json={"connector_id": connector["id"], "repository": "widget", "updates": "tags"},
    )

    assert res.status_code == 500
    assert "Rate Limit is reached" in res.json()["detail"]
    assert client.get("/api/extensions/plugin").json() == []


def test_edit_and_delete_extension(client, github_host):
    connector = create_connector(client)
    plugin = create_plugin(client, connector["id"])

    res = client.put(f"/api/extensions/plugin/{plugin['id']}", json={"updates": "commits", "branch": "develop"})

    assert res.status_code == 200
    body = res.json()
    assert body["branch"] == "develop"
    assert body["remote_version"] == "abc1234567890"
    assert body["display_version"] == "abc1234"
    assert body["has_update"] is True

    res = client.delete(f"/api/extensions/plugin/{plugin['id']}")
    assert res.json() == {"success": True}
    assert client.get(f"/api/extensions/plugin/{plugin['id']}").status_code == 404


def test_unknown_kind(client):
    assert client.get("/api/extensions/widgets").status_code == 422


def test_updates_and_install(client, github_host):
    connector = create_connector(client)
    plugin = create_plugin(client, connector["id"])
    client.put(f"/api/extensions/plugin/{plugin['id']}", json={"updates": "commits"})

    offers = client.get("/api/updates").json()

    assert [o["id"] for o in offers] == [plugin["id"]]
    assert offers[0]["new_version"] == "abc1234"
    assert offers[0]["package"].endswith("/zipball/abc1234567890")

    res = client.post(f"/api/extensions/plugin/{plugin['id']}/install")
    assert res.status_code == 200
    assert res.json()["local_version"] == "abc1234567890"
    assert client.get("/api/updates").json() == []


def test_repositories_and_sweep(client, github_host, inspector):
    connector = create_connector(client)
    plugin = create_plugin(client, connector["id"])

    res = client.get("/api/repositories", params={"search": "WID"})
    assert [r["id"] for r in res.json()] == [plugin["id"]]

    res = client.post("/api/updates/sweep")
    assert res.status_code == 200
    assert res.json()["pruned"] == []

    inspector.plugins = set()
    res = client.post("/api/updates/sweep")
    assert res.json()["pruned"] == [plugin["id"]]
    assert client.get("/api/repositories").json() == []


def test_delete_repository(client, github_host):
    connector = create_connector(client)
    plugin = create_plugin(client, connector["id"])

    assert client.delete(f"/api/repositories/{plugin['id']}").json() == {"success": True}
    assert client.delete(f"/api/repositories/{plugin['id']}").status_code == 404


def test_german_messages(tmp_path, api_client, installer, inspector):
    config = AppConfig(
        paths=PathsConfig(data_dir=tmp_path),
        scheduler=SchedulerConfig(enabled=False),
        ui=UIConfig(preferred_language="de"),
    )
    app = create_app(config, client=api_client, installer=installer, inspector=inspector)

    with TestClient(app) as client:
        res = client.post("/api/connectors", json={"type": "github", "owner": ""})

    assert res.json()["detail"] == "Das Feld Benutzer/Gruppe darf nicht leer sein."


def test_waiting_write_does_not_block_other_requests(client):
    store = client.app.state.store
    locked = threading.Event()
    release = threading.Event()
    results = []

    def hold_lock():
        with store.lock:
            locked.set()
            release.wait(5)

    holder = threading.Thread(target=hold_lock)
    holder.start()
    assert locked.wait(5)

    writer = threading.Thread(
        target=lambda: results.append(client.post("/api/connectors", json={"type": "github", "owner": "acme"}))
    )
    writer.start()
    time.sleep(0.2)

    started = time.monotonic()
    res = client.get("/api/hello")
    elapsed = time.monotonic() - started

    release.set()
    writer.join(5)
    holder.join(5)

    assert res.status_code == 200
    assert elapsed < 1.0
    assert [r.status_code for r in results] == [201]
