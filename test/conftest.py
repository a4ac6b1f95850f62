from zipfile import ZipFile
from pathlib import Path
import json

import pytest


class FakeHttp:
    """Routes of the fake HTTP layer, each URL maps to bytes or to a JSON-serializable
    value. Unknown URLs respond with a 404 error.
    """

    def __init__(self) -> None:
        self.routes = {}
        self.requested = []

    def request(self, method: str, url: str, **kwargs):

        from neobuild.http import HttpResponse, HttpError

        self.requested.append(url)

        if url not in self.routes:
            raise HttpError(HttpResponse(404, b""), method, url, ValueError("not found"))

        value = self.routes[url]
        return HttpResponse(200, value if isinstance(value, bytes) else json.dumps(value).encode())


class RecordWatcher:

    def __init__(self) -> None:
        self.events = []

    def handle(self, event) -> None:
        self.events.append(event)

    def of(self, ty: type) -> list:
        return [e for e in self.events if isinstance(e, ty)]


@pytest.fixture
def fake_http(monkeypatch):
    """This fixture replaces the HTTP requests of the resolver and the fetcher.
    """
    http = FakeHttp()
    monkeypatch.setattr("neobuild.resolve.http_request", http.request)
    monkeypatch.setattr("neobuild.fetch.http_request", http.request)
    return http


@pytest.fixture
def watcher():
    return RecordWatcher()


@pytest.fixture
def api():
    from neobuild.resolve import NeoForgeApi
    return NeoForgeApi(
        group="net.neoforged",
        artifact="neoforge",
        maven_url="https://maven.test/releases",
        loader_list_url="https://list.test/neoforge/list/{mc_version}",
        maven_metadata_url="https://maven.test/net/neoforged/neoforge/maven-metadata.xml",
        game_manifest_url="https://game.test/version_manifest.json",
        compat_manifest_url="https://compat.test/neo/manifest.json",
    )


@pytest.fixture
def spec(api):
    from neobuild.resolve import resolve_explicit
    return resolve_explicit("1.21.1", "21.1.77", api=api)


@pytest.fixture
def make_installer():
    """Return a function that writes an installer archive containing the given entries,
    dictionaries and lists are written as JSON.
    """

    def make(path: Path, entries: dict) -> bytes:
        path.parent.mkdir(parents=True, exist_ok=True)
        with ZipFile(path, "w") as zf:
            for name, value in entries.items():
                zf.writestr(name, value if isinstance(value, (bytes, str)) else json.dumps(value))
        return path.read_bytes()

    return make


@pytest.fixture
def install_profile():
    return {
        "spec": 1,
        "version": "neoforge-21.1.77",
        "json": "/version.json",
        "data": {
            "MAPPINGS": {
                "client": "[com.example:foo:1.0:client@zip]",
                "server": "[com.example:foo:1.0:server@zip]",
            },
            "BINPATCH": {
                "client": "/data/client.lzma",
                "server": "/data/server.lzma",
            },
            "MC_VERSION": {
                "client": "'1.21.1'",
                "server": "'1.21.1'",
            },
            "MOJMAPS": {
                "client": "[com.example:bar:2.0:mappings@txt]",
                "server": "[com.example:bar:2.0:mappings@txt]",
            },
        },
        "libraries": [
            {"name": "net.neoforged:neoforge:21.1.77:universal", "downloads": {"artifact": {"path": "net/neoforged/neoforge/21.1.77/neoforge-21.1.77-universal.jar"}}},
            {"name": "net.neoforged:neoforge:21.1.77:client"},
            {"name": "net.neoforged:installertools:2.1.2"},
        ],
    }


@pytest.fixture
def version_json():
    return {
        "id": "neoforge-21.1.77",
        "inheritsFrom": "1.21.1",
        "libraries": [
            {"name": "net.neoforged:bus:8.0.1"},
        ],
    }
