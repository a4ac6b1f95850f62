"""CLI languages management.
"""

from neobuild.build import BuildWarningEvent, InstallerError

from typing import Optional


def get_raw(key: str, kwargs: Optional[dict]) -> str:
    """Get a message translated using the given keyword formatting arguments.

    :param key: The key of the message to translate.
    :param kwargs: The keyword formatting dictionary.
    :return: Translated message, or the key itself if not found.
    """
    try:
        return lang[key].format_map(kwargs or {})
    except KeyError:
        return key


def get(key: str, **kwargs) -> str:
    """Get a message translated using the given keyword formatting arguments.

    :param key: The key of the message to translate.
    :return: Translated message, or the key itself if not found.
    """
    return get_raw(key, kwargs)


lang = {
    # Args
    "args": "NeoBuild downloads the NeoForge installer of a Minecraft version, installs "
        "the client in a build directory and keeps only the client jar and the data "
        "files it needs.",
    "args.latest": "Build the NeoForge version compatible with the latest Minecraft release.",
    "args.mc": "Minecraft version to build, the latest NeoForge version of it is used "
        "unless --neoforge is also given.",
    "args.neoforge": "NeoForge version to build, requires --mc.",
    "args.search": "Don't build, list the NeoForge versions of the Minecraft version given "
        "with --mc, or show the latest NeoForge version if --mc is not given.",
    "args.build_dir": "Directory where each version is built in its own subdirectory, "
        "defaults to 'build'.",
    "args.artifacts_file": "File where the path of the built client jar is recorded, "
        "defaults to 'artifacts.txt'.",
    "args.java": "Java executable used to run the installer, defaults to 'java'.",
    "args.mirror": "Additional maven repository URL, tried in order if the download from "
        "the official repository fails (can be given multiple times).",
    "args.keep_manifests": "Keep the version descriptor and the install profile next to the "
        "client jar when cleaning the build directory.",
    "args.timeout": "Set a global timeout (in decimal seconds) for network requests.",
    "args.output": "Set the output format of the builder, defaults to human-color.",
    "args.verbose": "Enable verbose output.",
    "args.usage": "Use --mc <version> to build a Minecraft version, --latest to build the latest one, "
        "or --mc <version> --neoforge <version> to build a specific version.",
    "args.neoforge_requires_mc": "The --neoforge argument requires --mc.",
    # Common
    "echo": "{echo}",
    "keyboard_interrupt": "Keyboard interrupted.",
    # Common errors
    "error.os": "An unexpected OS error happened:",
    "error.socket": "This operation requires an operational network, but a socket error happened:",
    "error.cert": "Certificate verification failed:",
    "error.http": "Request failed: {message}",
    "error.value": "Invalid response: {message}",
    # Search
    "search.mc_version": "Minecraft version",
    "search.loader_version": "NeoForge version",
    "search.installer_path": "Installer path",
    "search.latest": "Latest NeoForge version: {version}",
    # Resolve
    "resolve.release": "Resolving latest Minecraft release...",
    "resolve.loader": "Resolving NeoForge for Minecraft {mc_version}...",
    "resolve.resolved": "Resolved NeoForge {loader_version} for Minecraft {mc_version}",
    "resolve.not_found": "No NeoForge version found for Minecraft {version}",
    "resolve.unordered": "NeoForge versions of {mc_version} are not in ascending order, "
        "selected {selected} but {highest} is higher",
    # Fetch
    "fetch.attempt": "Downloading {url}...",
    "fetch.failed": "Download failed: {message}",
    "fetch.done": "Downloaded {url} ({size}o)",
    "fetch.error": "Download failed on every repository:",
    "fetch.error.entry": "{url}: {message}",
    # Build
    "build.start": "Building NeoForge {loader_version} for Minecraft {mc_version}...",
    "build.already_built": "Already built: {path}",
    "build.installer.start": "Running NeoForge installer...",
    "build.installer.args": "Installer command: {args}",
    "build.installer.done": "NeoForge installer done",
    f"build.installer.error.{InstallerError.LAUNCH_FAILED}": "Failed to launch the installer with '{java}': {message}",
    f"build.installer.error.{InstallerError.EXIT_CODE}": "The installer failed with exit code {returncode}",
    "build.client_jar.copied": "Copied client jar to {path}",
    "build.client_jar.not_found": "Client jar not found at {path}",
    "build.manifest.extracted": "Extracted {name}",
    "build.version.patched": "Patched version.json with {count} universal libraries",
    "build.data.copied": "Copied data file {name}",
    "build.data.not_found": "Data file not found: {path}",
    "build.cleaned": "Removed {path}",
    f"build.warning.{BuildWarningEvent.EXTRACT}": "Manifest extraction: {message}",
    f"build.warning.{BuildWarningEvent.PATCH}": "Patching version.json: {message}",
    f"build.warning.{BuildWarningEvent.DATA}": "Data files: {message}",
    f"build.warning.{BuildWarningEvent.CLEAN}": "Cleaning: {message}",
    "build.done": "Built {path}",
    "build.recorded": "Recorded artifact in {path}",
}
