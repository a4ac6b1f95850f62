from argparse import ArgumentParser
from pathlib import Path

from ..resolve import NeoForgeApi
from .output import Output
from .lang import get as _

from typing import Optional, List


# The following class is only used for type checking and represent a typed namespace
# as produced by the arguments registered to the argument parser.

class RootNs:
    latest: bool
    mc: Optional[str]
    neoforge: Optional[str]
    search: bool
    build_dir: Path
    artifacts_file: Path
    java: str
    mirror: Optional[List[str]]
    keep_manifests: bool
    timeout: Optional[float]
    out_kind: str
    verbose: int
    # Initialized by main function after argument parsing.
    out: Output
    api: NeoForgeApi


def register_arguments() -> ArgumentParser:
    parser = ArgumentParser(allow_abbrev=False, prog="neobuild", description=_("args"))
    parser.add_argument("--latest", help=_("args.latest"), action="store_true")
    parser.add_argument("--mc", help=_("args.mc"), metavar="VERSION")
    parser.add_argument("--neoforge", help=_("args.neoforge"), metavar="VERSION")
    parser.add_argument("--search", help=_("args.search"), action="store_true")
    parser.add_argument("--build-dir", help=_("args.build_dir"), type=Path, default=Path("build"))
    parser.add_argument("--artifacts-file", help=_("args.artifacts_file"), type=Path, default=Path("artifacts.txt"))
    parser.add_argument("--java", help=_("args.java"), default="java")
    parser.add_argument("--mirror", help=_("args.mirror"), action="append", metavar="URL")
    parser.add_argument("--keep-manifests", help=_("args.keep_manifests"), action="store_true")
    parser.add_argument("--timeout", help=_("args.timeout"), type=float)
    parser.add_argument("--output", help=_("args.output"), dest="out_kind", choices=get_outputs(), default="human-color")
    parser.add_argument("-v", dest="verbose", help=_("args.verbose"), action="count", default=0)
    return parser


def get_outputs() -> List[str]:
    return ["human-color", "human", "machine"]
