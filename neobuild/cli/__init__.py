"""Main entry point of the command line interface, this resolves the version to build
from the arguments, builds it and records the built client jar.
"""

import socket
import sys

from .parse import register_arguments, RootNs
from .output import Output, HumanOutput, MachineOutput
from .util import format_number
from .lang import get as _

from neobuild.http import HttpError
from neobuild.watcher import SimpleWatcher
from neobuild.resolve import NEOFORGE_API, VersionNotFoundError, ResolveEvent, \
    LoaderOrderWarningEvent, resolve_explicit, resolve_latest, resolve_game_version
from neobuild.fetch import DownloadError, FetchAttemptEvent, FetchFailedEvent, FetchedEvent
from neobuild.build import Builder, InstallerError, ClientJarNotFoundError, \
    BuildStartEvent, AlreadyBuiltEvent, InstallerStartEvent, InstallerDoneEvent, \
    ClientJarCopiedEvent, ManifestExtractedEvent, VersionPatchedEvent, \
    DataFileCopiedEvent, DataFileNotFoundEvent, CleanedEvent, BuildWarningEvent, \
    BuiltEvent, write_artifacts

from typing import cast, Optional, List, Callable, Any


EXIT_OK = 0
EXIT_FAILURE = 1

CommandHandler = Callable[[Any], Any]


def main(args: Optional[List[str]] = None):
    """Main entry point of the CLI. This function parses the input arguments and
    dispatches to the search or build command.
    """

    parser = register_arguments()
    ns: RootNs = cast(RootNs, parser.parse_args(sys.argv[1:] if args is None else args))

    # Setup common objects in the namespace.
    ns.out = get_output(ns.out_kind)
    ns.api = NEOFORGE_API
    socket.setdefaulttimeout(ns.timeout)

    cmd(cmd_search if ns.search else cmd_build, ns)


def get_output(kind: str) -> Output:
    """Internal function that construct the output depending on its kind.
    The kind is constrained by choices set to the arguments parser.
    """

    if kind == "human-color":
        return HumanOutput(True)
    elif kind == "human":
        return HumanOutput(False)
    elif kind == "machine":
        return MachineOutput()
    else:
        raise ValueError()


def cmd(handler: CommandHandler, ns: RootNs):
    """Generic command handler that launch the given handler with the given namespace,
    it handles error in order to pretty print them.
    """

    try:
        handler(ns)
        sys.exit(EXIT_OK)

    except HttpError as error:
        ns.out.task("FAILED", "error.http", message=str(error))
        ns.out.finish()

    except ValueError as error:
        ns.out.task("FAILED", "error.value", message=str(error))
        ns.out.finish()

    except KeyboardInterrupt:
        ns.out.finish()
        ns.out.task("HALT", "keyboard_interrupt")
        ns.out.finish()

    except OSError as error:

        from ssl import SSLCertVerificationError

        key = "error.os"
        if isinstance(error, SSLCertVerificationError):
            key = "error.cert"
        elif isinstance(error, (socket.gaierror, socket.timeout)):
            key = "error.socket"

        ns.out.task("FAILED", None)
        ns.out.finish()
        ns.out.task(None, key)
        ns.out.finish()
        ns.out.task(None, "echo", echo=str(error))
        ns.out.finish()

    sys.exit(EXIT_FAILURE)


def cmd_search(ns: RootNs):

    if ns.mc is None:
        ns.out.task("INFO", "search.latest", version=ns.api.request_maven_latest())
        ns.out.finish()
        return

    table = ns.out.table()
    table.add(_("search.mc_version"), _("search.loader_version"), _("search.installer_path"))
    table.separator()

    for spec in ns.api.request_loaders(ns.mc):
        table.add(spec.mc_version, spec.loader_version, spec.installer_path)

    table.print()


def cmd_build(ns: RootNs):

    if not ns.latest:
        if ns.mc is None and ns.neoforge is not None:
            ns.out.task("FAILED", "args.neoforge_requires_mc")
            ns.out.finish()
            sys.exit(EXIT_FAILURE)
        elif ns.mc is None:
            ns.out.task("FAILED", "args.usage")
            ns.out.finish()
            sys.exit(EXIT_FAILURE)

    watcher = BuildWatcher(ns)

    try:

        if ns.latest:
            spec = resolve_latest(api=ns.api, watcher=watcher)
        elif ns.neoforge is not None:
            spec = resolve_explicit(ns.mc, ns.neoforge, api=ns.api)
        else:
            spec = resolve_game_version(ns.mc, api=ns.api, watcher=watcher)

        builder = Builder(spec,
            build_dir=ns.build_dir,
            api=ns.api,
            mirrors=[ns.api.maven_url, *(ns.mirror or [])],
            java=ns.java,
            keep_manifests=ns.keep_manifests)

        client_jar_file = builder.build(watcher=watcher)

        write_artifacts(ns.artifacts_file, client_jar_file, spec)
        ns.out.task("OK", "build.recorded", path=ns.artifacts_file)
        ns.out.finish()

        sys.exit(EXIT_OK)

    except VersionNotFoundError as error:
        ns.out.task("FAILED", "resolve.not_found", version=error.version)
        ns.out.finish()

    except DownloadError as error:
        ns.out.task("FAILED", "fetch.error")
        ns.out.finish()
        for url, http_error in error.errors:
            ns.out.task(None, "fetch.error.entry", url=url, message=str(http_error))
            ns.out.finish()

    except InstallerError as error:
        ns.out.task("FAILED", f"build.installer.error.{error.code}",
            java=ns.java,
            returncode=error.returncode,
            message=str(error.origin))
        ns.out.finish()

    except ClientJarNotFoundError as error:
        ns.out.task("FAILED", "build.client_jar.not_found", path=error.path)
        ns.out.finish()

    sys.exit(EXIT_FAILURE)


class BuildWatcher(SimpleWatcher):

    def __init__(self, ns: RootNs) -> None:

        def progress_task(key: str, **kwargs) -> None:
            ns.out.task("..", key, **kwargs)

        def finish_task(state: str, key: str, **kwargs) -> None:
            ns.out.task(state, key, **kwargs)
            ns.out.finish()

        def verbose_task(state: str, key: str, **kwargs) -> None:
            if ns.verbose >= 1:
                finish_task(state, key, **kwargs)

        def resolve(e: ResolveEvent) -> None:
            if e.mc_version is None:
                progress_task("resolve.release")
            elif e.loader_version is None:
                progress_task("resolve.loader", mc_version=e.mc_version)
            else:
                finish_task("OK", "resolve.resolved", mc_version=e.mc_version, loader_version=e.loader_version)

        def installer_start(e: InstallerStartEvent) -> None:
            verbose_task("INFO", "build.installer.args", args=" ".join(e.args))
            # The installer prints to the same streams, so the task line is finished.
            finish_task("..", "build.installer.start")

        super().__init__({
            ResolveEvent: resolve,
            LoaderOrderWarningEvent: lambda e: finish_task("WARN", "resolve.unordered", mc_version=e.mc_version, selected=e.selected, highest=e.highest),
            BuildStartEvent: lambda e: finish_task("INFO", "build.start", mc_version=e.spec.mc_version, loader_version=e.spec.loader_version),
            AlreadyBuiltEvent: lambda e: finish_task("OK", "build.already_built", path=e.path),
            FetchAttemptEvent: lambda e: progress_task("fetch.attempt", url=e.url),
            FetchFailedEvent: lambda e: finish_task("WARN", "fetch.failed", message=str(e.error)),
            FetchedEvent: lambda e: finish_task("OK", "fetch.done", url=e.url, size=format_number(e.size)),
            InstallerStartEvent: installer_start,
            InstallerDoneEvent: lambda e: finish_task("OK", "build.installer.done"),
            ClientJarCopiedEvent: lambda e: finish_task("OK", "build.client_jar.copied", path=e.dst),
            ManifestExtractedEvent: lambda e: verbose_task("OK", "build.manifest.extracted", name=e.name),
            VersionPatchedEvent: lambda e: finish_task("OK", "build.version.patched", count=e.count),
            DataFileCopiedEvent: lambda e: finish_task("OK", "build.data.copied", name=e.dst.name),
            DataFileNotFoundEvent: lambda e: finish_task("WARN", "build.data.not_found", path=e.path),
            CleanedEvent: lambda e: verbose_task("INFO", "build.cleaned", path=e.path),
            BuildWarningEvent: lambda e: finish_task("WARN", f"build.warning.{e.step}", message=e.message),
            BuiltEvent: lambda e: finish_task("OK", "build.done", path=e.path),
        })
