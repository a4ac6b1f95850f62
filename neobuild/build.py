"""Building of a NeoForge client from its installer. The installer is downloaded in a
per-version workspace, run with Java, and its output is then assembled: the client jar
is copied to the workspace root, the version descriptor is patched with the universal
libraries of the install profile, the data files referenced by the install profile are
copied next to it and everything else is removed.

Only the installer download, the installer run and the client jar copy are fatal, other
assembly steps report their problems with `BuildWarningEvent` and never raise.
"""

from zipfile import ZipFile, BadZipFile
from pathlib import Path
import subprocess
import shutil
import os

from .resolve import VersionSpec, NeoForgeApi, NEOFORGE_API
from .fetch import fetch_installer
from .util import LibrarySpecifier, read_json_file, write_json_file, \
    expect_dict, expect_list
from .watcher import Watcher

from typing import Optional, List, Set


VERSION_FILE_NAME = "version.json"
INSTALL_PROFILE_FILE_NAME = "install_profile.json"
LAUNCHER_PROFILES_FILE_NAME = "launcher_profiles.json"


class Workspace:
    """The directory owning every file produced while building one loader version. The
    directory is `<build_dir>/<loader_version>`, it's not created by this constructor.
    """

    def __init__(self, build_dir: Path, spec: VersionSpec, api: NeoForgeApi = NEOFORGE_API) -> None:
        self.spec = spec
        self.api = api
        self.dir = build_dir / spec.loader_version
        self.libraries_dir = self.dir / "libraries"

    def installer_name(self) -> str:
        return self.spec.installer_path.rsplit("/", 1)[-1]

    def installer_file(self) -> Path:
        return self.dir / self.installer_name()

    def client_spec(self) -> LibrarySpecifier:
        return self.api.loader_spec(self.spec.loader_version, "client")

    def client_jar_name(self) -> str:
        return self.client_spec().file_name()

    def client_jar_file(self) -> Path:
        """This function returns the path of the final client jar, at workspace root.
        """
        return self.dir / self.client_jar_name()

    def installed_client_jar_file(self) -> Path:
        """This function returns the path where the installer produces the client jar.
        """
        return self.libraries_dir / self.client_spec().file_path()

    def version_file(self) -> Path:
        return self.dir / VERSION_FILE_NAME

    def install_profile_file(self) -> Path:
        return self.dir / INSTALL_PROFILE_FILE_NAME

    def launcher_profiles_file(self) -> Path:
        return self.dir / LAUNCHER_PROFILES_FILE_NAME

    def __repr__(self) -> str:
        return f"<Workspace {self.dir}>"


class Builder:
    """Build a client for one resolved version. The build is skipped if the client jar
    already exists at the workspace root, in such case nothing is downloaded or run.
    """

    def __init__(self, spec: VersionSpec, *,
        build_dir: Path = Path("build"),
        api: NeoForgeApi = NEOFORGE_API,
        mirrors: Optional[List[str]] = None,
        java: str = "java",
        keep_manifests: bool = False,
    ) -> None:
        self.spec = spec
        self.api = api
        self.workspace = Workspace(build_dir, spec, api)
        self.mirrors = [api.maven_url] if mirrors is None else mirrors
        self.java = java
        self.keep_manifests = keep_manifests

    def build(self, *, watcher: Optional[Watcher] = None) -> Path:
        """Run the whole build and return the path to the client jar.

        :raises DownloadError: If the installer can't be downloaded.
        :raises InstallerError: If the installer can't be launched or fails.
        :raises ClientJarNotFoundError: If the installer didn't produce the client jar.
        :raises OSError: If the workspace can't be prepared.
        """

        watcher = watcher or Watcher()
        ws = self.workspace

        watcher.handle(BuildStartEvent(self.spec))

        ws.dir.mkdir(parents=True, exist_ok=True)
        ensure_launcher_profiles(ws.launcher_profiles_file())

        client_jar_file = ws.client_jar_file()
        if client_jar_file.is_file():
            watcher.handle(AlreadyBuiltEvent(client_jar_file))
            return client_jar_file

        fetch_installer(self.spec.installer_path, ws.installer_file(), self.mirrors, watcher=watcher)
        run_installer(ws, self.java, watcher=watcher)

        client_jar_file = copy_client_jar(ws, watcher=watcher)
        extract_manifests(ws, watcher=watcher)
        patch_version(ws, watcher=watcher)
        data_files = copy_data_files(ws, watcher=watcher)

        retained = {client_jar_file.name, *data_files}
        if self.keep_manifests:
            retained.update((VERSION_FILE_NAME, INSTALL_PROFILE_FILE_NAME))
        clean_workspace(ws, retained, watcher=watcher)

        watcher.handle(BuiltEvent(client_jar_file))
        return client_jar_file


def ensure_launcher_profiles(path: Path) -> None:
    """Create an empty launcher profiles file, required by the installer to install a
    client, the file is left untouched if already existing.
    """
    if path.exists():
        return
    write_json_file(path, {
        "profiles": {},
        "selectedProfile": "",
        "clientToken": "",
        "authenticationDatabase": {},
        "settings": {},
    })


def run_installer(ws: Workspace, java: str = "java", *,
    watcher: Optional[Watcher] = None
) -> None:
    """Run the installer of the workspace to install the client in the workspace. The
    installer inherits the standard output and error streams.

    :raises InstallerError: If the installer can't be launched or exits with an error.
    """

    watcher = watcher or Watcher()
    args = [java, "-jar", ws.installer_name(), "--install-client", "."]
    watcher.handle(InstallerStartEvent(args))

    try:
        completed = subprocess.run(args, cwd=ws.dir)
    except OSError as error:
        raise InstallerError(InstallerError.LAUNCH_FAILED, origin=error)

    if completed.returncode != 0:
        raise InstallerError(InstallerError.EXIT_CODE, returncode=completed.returncode)

    watcher.handle(InstallerDoneEvent())


def copy_client_jar(ws: Workspace, *,
    watcher: Optional[Watcher] = None
) -> Path:
    """Copy the client jar produced by the installer to the workspace root.

    :raises ClientJarNotFoundError: If the installer didn't produce the client jar.
    """

    watcher = watcher or Watcher()
    src = ws.installed_client_jar_file()
    dst = ws.client_jar_file()

    if not src.is_file():
        raise ClientJarNotFoundError(src)

    shutil.copyfile(src, dst)
    watcher.handle(ClientJarCopiedEvent(src, dst))
    return dst


def extract_manifests(ws: Workspace, *,
    watcher: Optional[Watcher] = None
) -> None:
    """Extract the version descriptor and the install profile from the installer to the
    workspace root, each failure is only a warning.
    """

    watcher = watcher or Watcher()

    for name in (VERSION_FILE_NAME, INSTALL_PROFILE_FILE_NAME):
        try:
            with ZipFile(ws.installer_file()) as zf:
                zip_extract_file(zf, name, ws.dir / name)
        except (KeyError, OSError, BadZipFile) as error:
            watcher.handle(BuildWarningEvent(BuildWarningEvent.EXTRACT, f"{name}: {error}"))
            continue
        watcher.handle(ManifestExtractedEvent(name))


def patch_version(ws: Workspace, *,
    watcher: Optional[Watcher] = None
) -> int:
    """Append every universal loader library of the install profile to the libraries of
    the version descriptor, and rewrite the version descriptor. Libraries are appended
    without checking for duplicates, so the descriptor must be freshly extracted.

    :return: The number of appended libraries, zero if anything failed.
    """

    watcher = watcher or Watcher()

    try:
        install_profile = expect_dict(read_json_file(ws.install_profile_file()), f"{INSTALL_PROFILE_FILE_NAME}: /")
        install_libs = expect_list(install_profile.get("libraries", []), f"{INSTALL_PROFILE_FILE_NAME}: /libraries")
    except (OSError, ValueError) as error:
        watcher.handle(BuildWarningEvent(BuildWarningEvent.PATCH, str(error)))
        return 0

    prefix = ws.api.universal_prefix()
    suffix = ws.api.universal_suffix()
    universal_libs = []
    for lib in install_libs:
        if isinstance(lib, dict):
            name = lib.get("name")
            if isinstance(name, str) and name.startswith(prefix) and name.endswith(suffix):
                universal_libs.append(lib)

    if not len(universal_libs):
        watcher.handle(BuildWarningEvent(BuildWarningEvent.PATCH, "no universal library found"))
        return 0

    try:
        version = expect_dict(read_json_file(ws.version_file()), f"{VERSION_FILE_NAME}: /")
        version_libs = version.get("libraries")
        if isinstance(version_libs, list):
            version_libs.extend(universal_libs)
        else:
            version["libraries"] = list(universal_libs)
        write_json_file(ws.version_file(), version)
    except (OSError, ValueError) as error:
        watcher.handle(BuildWarningEvent(BuildWarningEvent.PATCH, str(error)))
        return 0

    watcher.handle(VersionPatchedEvent(len(universal_libs)))
    return len(universal_libs)


def copy_data_files(ws: Workspace, *,
    watcher: Optional[Watcher] = None
) -> Set[str]:
    """Copy to the workspace root every client file referenced by the data section of
    the install profile, each file is searched in the whole workspace by its maven path.

    :return: The names of the files copied to the workspace root.
    """

    watcher = watcher or Watcher()
    copied: Set[str] = set()

    try:
        install_profile = expect_dict(read_json_file(ws.install_profile_file()), f"{INSTALL_PROFILE_FILE_NAME}: /")
        data = expect_dict(install_profile.get("data"), f"{INSTALL_PROFILE_FILE_NAME}: /data")
    except (OSError, ValueError) as error:
        watcher.handle(BuildWarningEvent(BuildWarningEvent.DATA, str(error)))
        return copied

    for data_val in data.values():

        if not isinstance(data_val, dict):
            continue
        client_val = data_val.get("client")
        if not isinstance(client_val, str):
            continue

        try:
            spec = LibrarySpecifier.from_bracketed(client_val)
        except ValueError:
            continue  # Not a library reference, like literal values or embedded files.

        src = find_file(ws.dir, spec.file_path())
        if src is None:
            watcher.handle(DataFileNotFoundEvent(spec.file_path()))
            continue

        dst = ws.dir / src.name
        try:
            shutil.copyfile(src, dst)
        except OSError as error:
            watcher.handle(BuildWarningEvent(BuildWarningEvent.DATA, f"{src}: {error}"))
            continue

        watcher.handle(DataFileCopiedEvent(src, dst))
        copied.add(src.name)

    return copied


def clean_workspace(ws: Workspace, retained: Set[str], *,
    watcher: Optional[Watcher] = None
) -> None:
    """Remove every direct child of the workspace root whose name is not retained,
    directories are removed recursively.
    """

    watcher = watcher or Watcher()

    try:
        children = sorted(ws.dir.iterdir())
    except OSError as error:
        watcher.handle(BuildWarningEvent(BuildWarningEvent.CLEAN, str(error)))
        return

    for child in children:
        if child.name in retained:
            continue
        try:
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
        except OSError as error:
            watcher.handle(BuildWarningEvent(BuildWarningEvent.CLEAN, f"{child}: {error}"))
            continue
        watcher.handle(CleanedEvent(child))


def find_file(root: Path, rel_path: str) -> Optional[Path]:
    """Walk the given directory and return the first file whose path ends with the
    given relative path (with forward slashes). The walk is done in sorted order.
    """

    rel_parts = tuple(rel_path.split("/"))
    for dir_path, dir_names, file_names in os.walk(root):
        dir_names.sort()
        for file_name in sorted(file_names):
            if file_name != rel_parts[-1]:
                continue
            path = Path(dir_path, file_name)
            if path.relative_to(root).parts[-len(rel_parts):] == rel_parts:
                return path

    return None


def zip_extract_file(zf: ZipFile, entry_path: str, dst_path: Path):
    """Special function used to extract a specific file entry to a destination.
    This is different from ZipFile.extract because the latter keep the full entry's path.
    """
    dst_path.parent.mkdir(parents=True, exist_ok=True)
    with zf.open(entry_path) as src, dst_path.open("wb") as dst:
        shutil.copyfileobj(src, dst)


def write_artifacts(path: Path, client_jar_file: Path, spec: VersionSpec) -> None:
    """Write the artifacts record of the last build: a single line with the client jar
    path, the game version and the loader version. The file is truncated.
    """
    with path.open("wt") as fp:
        fp.write(f"{client_jar_file} {spec.mc_version} {spec.loader_version}\n")


class InstallerError(Exception):
    """Raised when the installer can't be launched or exits with an error, the particular
    reason is given as code.
    """

    LAUNCH_FAILED = "launch_failed"
    EXIT_CODE = "exit_code"

    def __init__(self, code: str, *, returncode: Optional[int] = None, origin: Optional[OSError] = None) -> None:
        self.code = code
        self.returncode = returncode
        self.origin = origin

    def __str__(self) -> str:
        return repr((self.code, self.returncode, self.origin))


class ClientJarNotFoundError(Exception):
    """Raised when the client jar was not produced by the installer where expected.
    """
    def __init__(self, path: Path) -> None:
        self.path = path

    def __str__(self) -> str:
        return repr(str(self.path))


class BuildStartEvent:
    __slots__ = "spec",
    def __init__(self, spec: VersionSpec) -> None:
        self.spec = spec

class AlreadyBuiltEvent:
    """Event triggered when the client jar already exists and the build is skipped.
    """
    __slots__ = "path",
    def __init__(self, path: Path) -> None:
        self.path = path

class InstallerStartEvent:
    """Event triggered just before running the installer, with its arguments.
    """
    __slots__ = "args",
    def __init__(self, args: List[str]) -> None:
        self.args = args

class InstallerDoneEvent:
    __slots__ = tuple()

class ClientJarCopiedEvent:
    __slots__ = "src", "dst"
    def __init__(self, src: Path, dst: Path) -> None:
        self.src = src
        self.dst = dst

class ManifestExtractedEvent:
    __slots__ = "name",
    def __init__(self, name: str) -> None:
        self.name = name

class VersionPatchedEvent:
    """Event triggered when the version descriptor has been patched.
    """
    __slots__ = "count",
    def __init__(self, count: int) -> None:
        self.count = count

class DataFileCopiedEvent:
    __slots__ = "src", "dst"
    def __init__(self, src: Path, dst: Path) -> None:
        self.src = src
        self.dst = dst

class DataFileNotFoundEvent:
    """Event triggered when a data file referenced by the install profile can't be found
    in the workspace, it is skipped.
    """
    __slots__ = "path",
    def __init__(self, path: str) -> None:
        self.path = path

class CleanedEvent:
    __slots__ = "path",
    def __init__(self, path: Path) -> None:
        self.path = path

class BuildWarningEvent:
    """Event triggered when a non-fatal assembly step has failed, the step is given as
    code with a human-readable message.
    """

    EXTRACT = "extract"
    PATCH = "patch"
    DATA = "data"
    CLEAN = "clean"

    __slots__ = "step", "message"
    def __init__(self, step: str, message: str) -> None:
        self.step = step
        self.message = message

class BuiltEvent:
    __slots__ = "path",
    def __init__(self, path: Path) -> None:
        self.path = path
