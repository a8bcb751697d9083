from http import HTTPStatus
from typing import Mapping, Optional, Union

from ._collections import HTTPHeaderDict

__all__ = ["ResponseMetadata"]


class ResponseMetadata:
    """
    Everything about a response except its body: status line, headers and
    the URL that produced it. Response interceptors receive and return it
    alongside the body bytes.

    :param status:
        HTTP status code. ``None`` for responses that did not come from an
        HTTP exchange, which are never classified as failures.
    :param reason:
        Reason phrase. Derived from ``status`` when not given.
    """

    def __init__(
        self,
        status: Optional[int],
        headers: Optional[Union[Mapping[str, str], HTTPHeaderDict]] = None,
        reason: Optional[str] = None,
        url: Optional[str] = None,
        http_version: str = "HTTP/1.1",
    ) -> None:
        if isinstance(headers, HTTPHeaderDict):
            self.headers = headers
        else:
            self.headers = HTTPHeaderDict(headers)
        self.status = status
        self.reason = reason if reason is not None else _default_reason(status)
        self.url = url
        self.http_version = http_version

    @property
    def is_success(self) -> bool:
        return self.status is None or 200 <= self.status <= 299

    def __str__(self) -> str:
        status_line = f"{self.http_version} {self.status} {self.reason}".rstrip()
        if self.url:
            return f"{status_line} ({self.url})"
        return status_line

    def __repr__(self) -> str:
        return f"<ResponseMetadata [{self.status}] {self.url}>"


def _default_reason(status: Optional[int]) -> str:
    if status is None:
        return ""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""
