"""Download of installer archives from a list of maven mirrors.
"""

from pathlib import Path

from .http import http_request, HttpError
from .watcher import Watcher

from typing import Optional, List, Tuple


def fetch_installer(installer_path: str, dst: Path, mirrors: List[str], *,
    watcher: Optional[Watcher] = None
) -> None:
    """Download the installer at the given path (with leading slash) into the destination
    file, trying each mirror base URL in order until one succeeds.

    The archive is first written to a `.part` file next to the destination and then
    renamed, so the destination file either doesn't exist or is complete.

    :raises DownloadError: If the download failed on every mirror.
    :raises OSError: If the destination file can't be written.
    """

    watcher = watcher or Watcher()
    errors: List[Tuple[str, HttpError]] = []

    for mirror in mirrors:

        url = f"{mirror.rstrip('/')}{installer_path}"
        watcher.handle(FetchAttemptEvent(url))

        try:
            res = http_request("GET", url, accept="application/java-archive")
        except HttpError as error:
            errors.append((url, error))
            watcher.handle(FetchFailedEvent(url, error))
            continue

        tmp_dst = dst.with_name(f"{dst.name}.part")
        try:
            with tmp_dst.open("wb") as fp:
                fp.write(res.data)
            tmp_dst.replace(dst)
        except OSError:
            tmp_dst.unlink(missing_ok=True)
            raise

        watcher.handle(FetchedEvent(url, dst, len(res.data)))
        return

    raise DownloadError(errors)


class DownloadError(Exception):
    """Raised when the installer could not be downloaded from any mirror, the error of
    each mirror is given with its URL.
    """
    def __init__(self, errors: List[Tuple[str, HttpError]]) -> None:
        self.errors = errors

    def __str__(self) -> str:
        return repr(self.errors)


class FetchAttemptEvent:
    """Event triggered when a download is attempted from a mirror.
    """
    __slots__ = "url",
    def __init__(self, url: str) -> None:
        self.url = url

class FetchFailedEvent:
    """Event triggered when a download from a mirror has failed, the next mirror will
    be tried if any.
    """
    __slots__ = "url", "error"
    def __init__(self, url: str, error: HttpError) -> None:
        self.url = url
        self.error = error

class FetchedEvent:
    """Event triggered when the archive has been successfully downloaded.
    """
    __slots__ = "url", "dst", "size"
    def __init__(self, url: str, dst: Path, size: int) -> None:
        self.url = url
        self.dst = dst
        self.size = size
