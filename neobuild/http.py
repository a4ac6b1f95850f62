"""Synchronous HTTP requests over urllib, every failure is raised as `HttpError`.
"""

from urllib.error import HTTPError
from http.client import HTTPResponse, HTTPException
import urllib.request
import json
import ssl

import certifi

from . import BUILDER_NAME, BUILDER_VERSION

from typing import Optional, Any, Dict


__all__ = ["HttpResponse", "HttpError", "http_request"]


class HttpResponse:
    """A received response, its status is zero when no response could be received.
    """

    def __init__(self, status: int, data: bytes, headers: Optional[Dict[str, str]] = None) -> None:
        self.status = status
        self.data = data
        self.headers = {} if headers is None else headers

    @classmethod
    def read_from(cls, res: HTTPResponse) -> "HttpResponse":
        """Read the whole body of an urllib response.
        """
        return cls(res.status, res.read(), dict(res.getheaders()))

    @classmethod
    def read_error(cls, error: HTTPError) -> "HttpResponse":
        """Read the whole body of an urllib HTTP error, that carries the response.
        """
        return cls(error.code, error.read(), dict(error.headers or {}))

    def json(self) -> Any:
        """Parse the data as JSON. This may raise a JSONDecodeError.
        """
        return json.loads(self.data)

    def text(self) -> str:
        return self.data.decode()

    def __repr__(self) -> str:
        return f"<HttpResponse {self.status}>"


class HttpError(Exception):
    """Raised when the status of the response is not 2xx, or when no response could be
    received, in such case the response has a zero status and no data. The urllib error
    is given as reason.
    """

    def __init__(self, res: HttpResponse, method: str, url: str, reason: Exception) -> None:
        super().__init__(res, method, url, reason)
        self.res = res
        self.method = method
        self.url = url
        self.reason = reason

    def __str__(self) -> str:
        if self.res.status == 0:
            return f"{self.method} {self.url}: {self.reason}"
        return f"{self.method} {self.url}: status {self.res.status}"

    def __repr__(self) -> str:
        return f"<HttpError {self.res}, origin: {self.method} {self.url}, reason: {self.reason}>"


_ssl_context: Optional[ssl.SSLContext] = None


def _get_ssl_context() -> ssl.SSLContext:
    global _ssl_context
    if _ssl_context is None:
        _ssl_context = ssl.create_default_context(cafile=certifi.where())
    return _ssl_context


def http_request(method: str, url: str, *,
    headers: Optional[Dict[str, str]] = None,
    accept: Optional[str] = None
) -> HttpResponse:
    """Make a synchronous HTTP request, certificates are verified against the certifi
    bundle. The timeout is the global socket timeout.

    :return: The response, its status is 2xx.
    :raises HttpError: If the status is not 2xx or if the response could not be fully
        received, because of a network error or a truncated body.
    """

    headers = dict(headers or {})
    headers.setdefault("User-Agent", f"{BUILDER_NAME}/{BUILDER_VERSION}")
    if accept is not None:
        headers["Accept"] = accept

    req = urllib.request.Request(url, headers=headers, method=method)

    try:
        with urllib.request.urlopen(req, context=_get_ssl_context()) as res:
            return HttpResponse.read_from(res)
    except HTTPError as error:
        try:
            error_res = HttpResponse.read_error(error)
        except (OSError, HTTPException):
            error_res = HttpResponse(error.code, b"")
        raise HttpError(error_res, method, url, error)
    except (OSError, HTTPException) as error:
        # Also covers URLError and the errors raised while reading the body.
        raise HttpError(HttpResponse(0, b""), method, url, error)
