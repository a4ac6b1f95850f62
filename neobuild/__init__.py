"""Main module for NeoBuild API.

NeoBuild resolves a NeoForge version, downloads its installer, runs it against a 
per-version workspace and keeps only the client files needed to launch the game. The
`neobuild.build` module is the entry point for programmatic use, `neobuild.cli` for the
command line.
"""

BUILDER_NAME = "neobuild"
BUILDER_VERSION = "1.0.0"
BUILDER_AUTHORS = ["NeoBuild contributors"]
BUILDER_COPYRIGHT = "NeoBuild  Copyright (C) 2025  NeoBuild contributors"
