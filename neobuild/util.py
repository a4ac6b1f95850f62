"""Maven coordinates, typed access to parsed JSON manifests and loader version
ordering, shared by the resolver and the builder.
"""

from pathlib import Path
import json
import re

from typing import Optional, Any, Tuple


class LibrarySpecifier:
    """Maven coordinates of an artifact, `group:artifact:version[:classifier][@ext]`,
    the extension defaults to `jar`.
    """

    __slots__ = "group", "artifact", "version", "classifier", "extension"

    coordinates_re = re.compile(r"^([^:@\[\]]+):([^:@\[\]]+):([^:@\[\]]+)(?::([^:@\[\]]+))?(?:@([^:@\[\]]+))?$")
    bracketed_re = re.compile(r"^\[([^\]]+)\]$")

    def __init__(self, group: str, artifact: str, version: str, classifier: Optional[str] = None, extension: str = "jar"):
        self.group = group
        self.artifact = artifact
        self.version = version
        self.classifier = classifier
        self.extension = extension

    @classmethod
    def from_str(cls, s: str) -> "LibrarySpecifier":
        """Parse coordinates like `net.neoforged:neoforge:21.1.77:universal`.

        :raises ValueError: If the coordinates are not in the expected format.
        """
        match = cls.coordinates_re.match(s)
        if match is None:
            raise ValueError(f"invalid library specifier: {s}")
        group, artifact, version, classifier, extension = match.groups()
        return cls(group, artifact, version, classifier, extension or "jar")

    @classmethod
    def from_bracketed(cls, s: str) -> "LibrarySpecifier":
        """Parse a bracketed specifier `[group:artifact:version:classifier[@ext]]` as
        found in the data section of install profiles. Unlike `from_str` the classifier
        is mandatory here.

        Parts after the classifier are ignored, the extension is only read from the
        classifier part.

        :raises ValueError: If the string is not bracketed or has less than 4 parts.
        """

        match = cls.bracketed_re.match(s)
        if match is None:
            raise ValueError(f"invalid library specifier: not bracketed: {s}")

        parts = match.group(1).split(":")
        if len(parts) < 4:
            raise ValueError(f"invalid library specifier: missing classifier: {s}")

        group, artifact, version, classifier = parts[:4]
        classifier, _, extension = classifier.partition("@")
        if not all((group, artifact, version, classifier)):
            raise ValueError(f"invalid library specifier: empty part: {s}")

        return cls(group, artifact, version, classifier, extension or "jar")

    def _key(self) -> Tuple[str, str, str, Optional[str], str]:
        return self.group, self.artifact, self.version, self.classifier, self.extension

    def __str__(self) -> str:
        s = ":".join(p for p in self._key()[:4] if p is not None)
        return s if self.extension == "jar" else f"{s}@{self.extension}"

    def __eq__(self, other) -> bool:
        return isinstance(other, LibrarySpecifier) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"<LibrarySpecifier {self}>"

    def file_name(self) -> str:
        """Return the file name of the artifact, `<artifact>-<version>[-<classifier>].<ext>`.
        """
        parts = [self.artifact, self.version] if self.classifier is None else [self.artifact, self.version, self.classifier]
        return f"{'-'.join(parts)}.{self.extension}"

    def file_path(self) -> str:
        """Return the path of the artifact in a maven repository, always with forward
        slashes: `com.foo.bar:artifact:version@zip` gives
        `com/foo/bar/artifact/version/artifact-version.zip`.
        """
        return "/".join([*self.group.split("."), self.artifact, self.version, self.file_name()])


class ManifestTypeError(ValueError):
    """Raised by manifest accessors when a value has not the expected JSON type. The
    path is a JSON-pointer-like location used for diagnostics.
    """

    def __init__(self, path: str, expected: str, value: Any) -> None:
        super().__init__(path, expected, value)
        self.path = path
        self.expected = expected
        self.actual = type(value).__name__

    def __str__(self) -> str:
        return f"{self.path} must be {self.expected}, got {self.actual}"


def expect_dict(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise ManifestTypeError(path, "an object", value)
    return value


def expect_list(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise ManifestTypeError(path, "an array", value)
    return value


def expect_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ManifestTypeError(path, "a string", value)
    return value


def read_json_file(path: Path) -> Any:
    """Read and parse a whole JSON file.
    """
    with path.open("rt", encoding="utf-8") as fp:
        return json.load(fp)


def write_json_file(path: Path, data: Any) -> None:
    """Overwrite the given file with pretty-printed JSON (two spaces indent).
    """
    with path.open("wt", encoding="utf-8") as fp:
        json.dump(data, fp, indent=2)
        fp.write("\n")


def version_sort_key(version: str) -> Tuple[Tuple[int, Any], ...]:
    """Return a key that can be used to compare loader versions like `21.1.162` or
    `20.4.80-beta`. Numeric runs compare as numbers, a textual run sorts before the end
    of the version and the end before a numeric run: `21.1-beta < 21.1 < 21.1.1`.
    """
    key = [(2, int(part)) if part.isdigit() else (0, part)
        for part in re.findall(r"\d+|[^\d.\-+]+", version)]
    key.append((1, ""))
    return tuple(key)
