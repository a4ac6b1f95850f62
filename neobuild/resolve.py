"""Resolution of a concrete NeoForge build target, from an explicit version pair, from
the latest game release or from a game version alone.
"""

import xml.etree.ElementTree as ET

from .util import LibrarySpecifier, expect_dict, expect_list, expect_str, version_sort_key
from .http import http_request
from .watcher import Watcher

from typing import Optional, Any, List


class VersionSpec:
    """Identify one build target, it should be considered immutable once created by one
    of the resolve functions of this module.
    """

    __slots__ = "mc_version", "loader_version", "installer_path", "raw_version"

    def __init__(self, mc_version: str, loader_version: str, installer_path: str, raw_version: str) -> None:
        self.mc_version = mc_version
        self.loader_version = loader_version
        self.installer_path = installer_path
        self.raw_version = raw_version

    def __eq__(self, other) -> bool:
        return isinstance(other, VersionSpec) and \
            (self.mc_version, self.loader_version, self.installer_path, self.raw_version) == \
            (other.mc_version, other.loader_version, other.installer_path, other.raw_version)

    def __hash__(self) -> int:
        return hash((self.mc_version, self.loader_version, self.installer_path, self.raw_version))

    def __repr__(self) -> str:
        return f"<VersionSpec {self.mc_version}/{self.loader_version}>"


class NeoForgeApi:
    """Every remote endpoint and naming constant used to resolve and download a loader.
    The default instance is `NEOFORGE_API`, another one can be given to any function of
    this module to use mirrors or to test against local data.
    """

    def __init__(self, *,
        group: str,
        artifact: str,
        maven_url: str,
        loader_list_url: str,
        maven_metadata_url: str,
        game_manifest_url: str,
        compat_manifest_url: str,
    ) -> None:
        self.group = group
        self.artifact = artifact
        self.maven_url = maven_url
        self.loader_list_url = loader_list_url
        self.maven_metadata_url = maven_metadata_url
        self.game_manifest_url = game_manifest_url
        self.compat_manifest_url = compat_manifest_url

    def loader_spec(self, loader_version: str, classifier: Optional[str] = None) -> LibrarySpecifier:
        """Return the maven specifier of a loader artifact, like its installer or the
        client jar produced by the installer.
        """
        return LibrarySpecifier(self.group, self.artifact, loader_version, classifier)

    def installer_path(self, loader_version: str) -> str:
        """Return the path of the installer, relative to the maven repository, with a
        leading slash: `/net/neoforged/neoforge/<v>/neoforge-<v>-installer.jar`.
        """
        return f"/{self.loader_spec(loader_version, 'installer').file_path()}"

    def raw_version(self, loader_version: str) -> str:
        return f"{self.artifact}-{loader_version}"

    def universal_prefix(self) -> str:
        """Prefix of library names that are selected, with the `universal_suffix`, when
        patching the version descriptor.
        """
        return f"{self.group}:{self.artifact}:"

    def universal_suffix(self) -> str:
        return ":universal"

    def request_json(self, url: str) -> Any:
        """Generic HTTP request returning parsed JSON.
        """
        return http_request("GET", url, accept="application/json").json()

    def request_loaders(self, mc_version: str) -> List[VersionSpec]:
        """Request the list of loaders available for a game version, in the order they
        are returned by the server.
        """

        loaders = expect_list(self.request_json(self.loader_list_url.format(mc_version=mc_version)), "loader list: /")

        specs = []
        for i, loader in enumerate(loaders):
            loader = expect_dict(loader, f"loader list: /{i}")
            specs.append(VersionSpec(
                expect_str(loader.get("mcversion"), f"loader list: /{i}/mcversion"),
                expect_str(loader.get("version"), f"loader list: /{i}/version"),
                expect_str(loader.get("installerPath"), f"loader list: /{i}/installerPath"),
                expect_str(loader.get("rawVersion"), f"loader list: /{i}/rawVersion"),
            ))

        return specs

    def request_latest_release(self) -> str:
        """Request the latest stable game release from the game version manifest.
        """
        manifest = expect_dict(self.request_json(self.game_manifest_url), "game manifest: /")
        latest = expect_dict(manifest.get("latest"), "game manifest: /latest")
        return expect_str(latest.get("release"), "game manifest: /latest/release")

    def request_compatible_loader(self, mc_version: str) -> Optional[str]:
        """Request the loader compatibility manifest and return the first loader listed
        for the given game version, none if the game version has no loader.
        """

        manifest = expect_dict(self.request_json(self.compat_manifest_url), "compat manifest: /")
        game_versions = expect_list(manifest.get("gameVersions"), "compat manifest: /gameVersions")

        for i, game_version in enumerate(game_versions):
            game_version = expect_dict(game_version, f"compat manifest: /gameVersions/{i}")
            if game_version.get("id") != mc_version:
                continue
            loaders = expect_list(game_version.get("loaders", []), f"compat manifest: /gameVersions/{i}/loaders")
            if len(loaders):
                loader = expect_dict(loaders[0], f"compat manifest: /gameVersions/{i}/loaders/0")
                return expect_str(loader.get("id"), f"compat manifest: /gameVersions/{i}/loaders/0/id")

        return None

    def request_maven_latest(self) -> str:
        """Request the maven metadata of the loader artifact and return the version in
        `<versioning><latest>`.

        :raises ValueError: If the metadata is not valid XML or has no latest version.
        """

        res = http_request("GET", self.maven_metadata_url, accept="application/xml")
        try:
            root = ET.fromstring(res.data)
        except ET.ParseError as error:
            raise ValueError(f"maven metadata: {error}")

        latest = root.findtext("versioning/latest")
        if not latest:
            raise ValueError("maven metadata: missing <versioning><latest>")

        return latest.strip()


NEOFORGE_API = NeoForgeApi(
    group="net.neoforged",
    artifact="neoforge",
    maven_url="https://maven.neoforged.net/releases",
    loader_list_url="https://bmclapi2.bangbang93.com/neoforge/list/{mc_version}",
    maven_metadata_url="https://maven.neoforged.net/net/neoforged/neoforge/maven-metadata.xml",
    game_manifest_url="https://launchermeta.mojang.com/mc/game/version_manifest.json",
    compat_manifest_url="https://launcher-meta.modrinth.com/neo/v0/manifest.json",
)


def resolve_explicit(mc_version: str, loader_version: str, *,
    api: NeoForgeApi = NEOFORGE_API
) -> VersionSpec:
    """Construct the build target of an explicit game and loader version pair, this
    doesn't check that the pair actually exists.
    """
    return VersionSpec(mc_version, loader_version, api.installer_path(loader_version), api.raw_version(loader_version))


def resolve_latest(*,
    api: NeoForgeApi = NEOFORGE_API,
    watcher: Optional[Watcher] = None
) -> VersionSpec:
    """Resolve the latest game release and its compatible loader.

    :raises VersionNotFoundError: If the latest game release has no compatible loader.
    :raises HttpError: If any of the manifests can't be requested.
    """

    watcher = watcher or Watcher()

    watcher.handle(ResolveEvent(None, None))
    mc_version = api.request_latest_release()
    watcher.handle(ResolveEvent(mc_version, None))

    loader_version = api.request_compatible_loader(mc_version)
    if loader_version is None:
        raise VersionNotFoundError(mc_version)

    watcher.handle(ResolveEvent(mc_version, loader_version))
    return resolve_explicit(mc_version, loader_version, api=api)


def resolve_game_version(mc_version: str, *,
    api: NeoForgeApi = NEOFORGE_API,
    watcher: Optional[Watcher] = None
) -> VersionSpec:
    """Resolve the latest loader of the given game version, this is the last loader of
    the list returned by the server, the list is expected to be in ascending order, a
    `LoaderOrderWarningEvent` is triggered if it's not the case.

    :raises VersionNotFoundError: If the game version has no loader.
    :raises HttpError: If the loader list can't be requested.
    """

    watcher = watcher or Watcher()
    watcher.handle(ResolveEvent(mc_version, None))

    loaders = api.request_loaders(mc_version)
    if not len(loaders):
        raise VersionNotFoundError(mc_version)

    selected = loaders[-1]
    highest = max(loaders, key=lambda spec: version_sort_key(spec.loader_version))
    if version_sort_key(highest.loader_version) > version_sort_key(selected.loader_version):
        watcher.handle(LoaderOrderWarningEvent(mc_version, selected.loader_version, highest.loader_version))

    watcher.handle(ResolveEvent(selected.mc_version, selected.loader_version))
    return VersionSpec(selected.mc_version, selected.loader_version,
        strip_maven_prefix(selected.installer_path), selected.raw_version)


def strip_maven_prefix(installer_path: str) -> str:
    """Remove the first `/maven` segment of an installer path as returned by the loader
    list, `/maven/net/x/1.0/foo.jar` becomes `/net/x/1.0/foo.jar`.
    """
    return installer_path.replace("/maven/", "/", 1)


class VersionNotFoundError(Exception):
    """Raised when no loader was found, the game version it was searched for is given.
    """
    def __init__(self, version: str) -> None:
        self.version = version

    def __str__(self) -> str:
        return repr(self.version)


class ResolveEvent:
    """Event triggered while resolving the build target. The game version is none while
    the latest release is being resolved, the loader version is none while the loader
    is being resolved, both are set when resolution has finished.
    """
    __slots__ = "mc_version", "loader_version"
    def __init__(self, mc_version: Optional[str], loader_version: Optional[str]) -> None:
        self.mc_version = mc_version
        self.loader_version = loader_version


class LoaderOrderWarningEvent:
    """Event triggered when the loader list of a game version is not in ascending order,
    the last loader is selected anyway but it's not the highest one.
    """
    __slots__ = "mc_version", "selected", "highest"
    def __init__(self, mc_version: str, selected: str, highest: str) -> None:
        self.mc_version = mc_version
        self.selected = selected
        self.highest = highest
