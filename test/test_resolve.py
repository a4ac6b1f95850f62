import pytest

from neobuild.resolve import VersionSpec, VersionNotFoundError, ResolveEvent, \
    LoaderOrderWarningEvent, resolve_explicit, resolve_latest, resolve_game_version, \
    strip_maven_prefix, NEOFORGE_API


def _loader(version: str, mc_version: str = "1.21.1") -> dict:
    return {
        "version": version,
        "installerPath": f"/maven/net/neoforged/neoforge/{version}/neoforge-{version}-installer.jar",
        "mcversion": mc_version,
        "rawVersion": f"neoforge-{version}",
    }


def test_resolve_explicit():

    spec = resolve_explicit("1.21.1", "21.1.77")
    assert spec == VersionSpec("1.21.1", "21.1.77",
        "/net/neoforged/neoforge/21.1.77/neoforge-21.1.77-installer.jar",
        "neoforge-21.1.77")

    assert NEOFORGE_API.maven_url + spec.installer_path == \
        "https://maven.neoforged.net/releases/net/neoforged/neoforge/21.1.77/neoforge-21.1.77-installer.jar"


def test_strip_maven_prefix():
    assert strip_maven_prefix("/maven/net/x/1.0/foo.jar") == "/net/x/1.0/foo.jar"
    assert strip_maven_prefix("/net/x/1.0/foo.jar") == "/net/x/1.0/foo.jar"
    assert strip_maven_prefix("/mavenized/x/1.0/foo.jar") == "/mavenized/x/1.0/foo.jar"


def test_resolve_latest(fake_http, api, watcher):

    fake_http.routes[api.game_manifest_url] = {"latest": {"release": "1.21.1", "snapshot": "24w40a"}, "versions": []}
    fake_http.routes[api.compat_manifest_url] = {"gameVersions": [
        {"id": "1.21", "stable": True, "loaders": [{"id": "21.0.167", "url": "https://compat.test/21.0.167.json"}]},
        {"id": "1.21.1", "stable": True, "loaders": [
            {"id": "21.1.77", "url": "https://compat.test/21.1.77.json"},
            {"id": "21.1.76", "url": "https://compat.test/21.1.76.json"},
        ]},
    ]}

    spec = resolve_latest(api=api, watcher=watcher)
    assert spec == resolve_explicit("1.21.1", "21.1.77", api=api)

    events = watcher.of(ResolveEvent)
    assert [(e.mc_version, e.loader_version) for e in events] == [(None, None), ("1.21.1", None), ("1.21.1", "21.1.77")]


@pytest.mark.parametrize("game_versions", [
    [{"id": "1.21", "loaders": [{"id": "21.0.167", "url": ""}]}],
    [{"id": "1.21.1", "loaders": []}],
    [],
])
def test_resolve_latest_not_found(fake_http, api, game_versions):

    fake_http.routes[api.game_manifest_url] = {"latest": {"release": "1.21.1"}}
    fake_http.routes[api.compat_manifest_url] = {"gameVersions": game_versions}

    with pytest.raises(VersionNotFoundError) as error:
        resolve_latest(api=api)
    assert error.value.version == "1.21.1"

    assert fake_http.requested == [api.game_manifest_url, api.compat_manifest_url]


def test_resolve_latest_malformed(fake_http, api):

    from neobuild.util import ManifestTypeError

    fake_http.routes[api.game_manifest_url] = {"latest": "1.21.1"}

    with pytest.raises(ManifestTypeError):
        resolve_latest(api=api)


def test_resolve_game_version(fake_http, api, watcher):

    fake_http.routes[api.loader_list_url.format(mc_version="1.21.1")] = [
        _loader("21.1.1"), _loader("21.1.2"), _loader("21.1.10"),
    ]

    spec = resolve_game_version("1.21.1", api=api, watcher=watcher)
    assert spec.mc_version == "1.21.1"
    assert spec.loader_version == "21.1.10"
    assert spec.raw_version == "neoforge-21.1.10"
    assert spec.installer_path == "/net/neoforged/neoforge/21.1.10/neoforge-21.1.10-installer.jar"

    assert not len(watcher.of(LoaderOrderWarningEvent))


def test_resolve_game_version_unordered(fake_http, api, watcher):

    fake_http.routes[api.loader_list_url.format(mc_version="1.21.1")] = [
        _loader("21.1.10"), _loader("21.1.1"), _loader("21.1.2"),
    ]

    # The last loader is selected anyway, but it's signaled.
    spec = resolve_game_version("1.21.1", api=api, watcher=watcher)
    assert spec.loader_version == "21.1.2"

    warning, = watcher.of(LoaderOrderWarningEvent)
    assert warning.selected == "21.1.2"
    assert warning.highest == "21.1.10"


def test_resolve_game_version_not_found(fake_http, api):

    fake_http.routes[api.loader_list_url.format(mc_version="1.99")] = []
    with pytest.raises(VersionNotFoundError) as error:
        resolve_game_version("1.99", api=api)
    assert error.value.version == "1.99"


def test_resolve_game_version_http_error(fake_http, api):

    from neobuild.http import HttpError

    with pytest.raises(HttpError) as error:
        resolve_game_version("1.21.1", api=api)
    assert error.value.res.status == 404


def test_request_maven_latest(fake_http, api):

    fake_http.routes[api.maven_metadata_url] = b"""<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>net.neoforged</groupId>
  <artifactId>neoforge</artifactId>
  <versioning>
    <latest>21.3.4-beta</latest>
    <release>21.3.4-beta</release>
    <versions>
      <version>21.1.77</version>
      <version>21.3.4-beta</version>
    </versions>
  </versioning>
</metadata>
"""

    assert api.request_maven_latest() == "21.3.4-beta"

    fake_http.routes[api.maven_metadata_url] = b"<metadata><versioning></versioning></metadata>"
    with pytest.raises(ValueError):
        api.request_maven_latest()

    fake_http.routes[api.maven_metadata_url] = b"<metadata><versioning>"
    with pytest.raises(ValueError):
        api.request_maven_latest()


def test_request_loaders_malformed(fake_http, api):

    from neobuild.util import ManifestTypeError

    fake_http.routes[api.loader_list_url.format(mc_version="1.21.1")] = [{"version": 21}]

    with pytest.raises(ManifestTypeError) as error:
        api.request_loaders("1.21.1")
    assert error.value.path == "loader list: /0/mcversion"


def test_resolve_game_version_pre_release_ordered(fake_http, api, watcher):

    fake_http.routes[api.loader_list_url.format(mc_version="1.20.6")] = [
        _loader("20.6.1-beta", "1.20.6"), _loader("20.6.1", "1.20.6"),
    ]

    spec = resolve_game_version("1.20.6", api=api, watcher=watcher)
    assert spec.loader_version == "20.6.1"
    assert not len(watcher.of(LoaderOrderWarningEvent))
