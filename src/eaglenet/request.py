import dataclasses
import re
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple

from ._collections import HTTPHeaderDict
from .body import Body, as_body
from .fields import MultipartPart
from .filepost import (
    MULTIPART_FORM_DATA,
    choose_boundary,
    encode_multipart_formdata,
    iter_text_parts,
    multipart_content_type,
)
from .serialization import JSONEncoder
from .util.url import _TYPE_TARGET, resolve_url

__all__ = ["ContentType", "HTTPMethod", "PreparedRequest", "Request"]

# RFC 7230 Section 3.2.6 "token"
_METHOD_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


class HTTPMethod:
    """Request methods understood by every transport."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @staticmethod
    def custom(method: str) -> str:
        """
        Validate and return an arbitrary method token such as ``PATCH``,
        ``HEAD`` or ``OPTIONS``.
        """
        if not isinstance(method, str) or not _METHOD_TOKEN_RE.match(method):
            raise ValueError(f"Invalid HTTP method token: {method!r}")
        return method


class ContentType:
    TEXT_PLAIN = "text/plain"
    APPLICATION_JSON = "application/json"
    MULTIPART_FORM_DATA = MULTIPART_FORM_DATA
    APPLICATION_OCTET_STREAM = "application/octet-stream"
    IMAGE_PNG = "image/png"
    IMAGE_JPEG = "image/jpeg"


@dataclasses.dataclass(frozen=True)
class Request:
    """
    Describes one HTTP call before it is executed.

    Instances are immutable; the ``with_*`` helpers return updated copies.
    Use :meth:`Request.multipart` to describe a multipart/form-data upload.

    :param target:
        The base endpoint, a ``str`` or :class:`~eaglenet.util.url.Url`.
        It is only parsed when the request is executed.
    :param path:
        Appended to the target's path component.
    :param method:
        One of the :class:`HTTPMethod` constants or a custom token.
    :param headers:
        Request headers. A ``Content-Type`` given here, in any letter case,
        wins over :attr:`content_type`.
    :param params:
        Query parameters appended to the target's own query string.
    :param body:
        Bytes to send as-is, or any value to encode as JSON.
    :param content_type:
        Value of the ``Content-Type`` header when ``headers`` has none.
    """

    target: _TYPE_TARGET
    path: Optional[str] = None
    method: str = HTTPMethod.GET
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    params: Mapping[str, str] = dataclasses.field(default_factory=dict)
    body: Optional[Body] = None
    content_type: str = ContentType.APPLICATION_JSON
    parts: Tuple[MultipartPart, ...] = ()
    boundary: Optional[str] = None

    def __post_init__(self) -> None:
        HTTPMethod.custom(self.method)

        # Frozen dataclass, so normalize fields through object.__setattr__.
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))
        object.__setattr__(self, "params", MappingProxyType(dict(self.params or {})))
        object.__setattr__(self, "body", as_body(self.body))
        object.__setattr__(self, "parts", tuple(self.parts))

        if self.boundary is None:
            if self.parts:
                raise ValueError(
                    "Multipart parts require a multipart request, "
                    "use Request.multipart()"
                )
            return

        if self.body is not None:
            raise ValueError("A multipart request cannot also carry a body")
        object.__setattr__(
            self, "content_type", multipart_content_type(self.boundary)
        )

    @classmethod
    def multipart(
        cls,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        method: str = HTTPMethod.POST,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        parts: Iterable[MultipartPart] = (),
        boundary: Optional[str] = None,
    ) -> "Request":
        """
        Describe a multipart/form-data request. A boundary is generated with
        :func:`~eaglenet.filepost.choose_boundary` unless one is given.
        """
        return cls(
            target,
            path=path,
            method=method,
            headers=headers or {},
            params=params or {},
            parts=tuple(parts),
            boundary=boundary or choose_boundary(),
        )

    @property
    def is_multipart(self) -> bool:
        return self.boundary is not None

    def _replace(self, **changes: Any) -> "Request":
        return dataclasses.replace(self, **changes)

    def with_header(self, key: str, value: str) -> "Request":
        return self.with_headers({key: value})

    def with_headers(self, headers: Mapping[str, str]) -> "Request":
        merged = HTTPHeaderDict(self.headers)
        # __setitem__ replaces names that differ only in letter case
        merged.update(headers)
        return self._replace(headers=dict(merged))

    def with_param(self, key: str, value: str) -> "Request":
        return self.with_params({key: value})

    def with_params(self, params: Mapping[str, str]) -> "Request":
        return self._replace(params={**self.params, **params})

    def with_body(self, body: Any) -> "Request":
        if self.is_multipart:
            raise ValueError("A multipart request cannot also carry a body")
        return self._replace(body=as_body(body))

    def with_part(self, part: MultipartPart) -> "Request":
        return self.with_parts([part])

    def with_parts(self, parts: Iterable[MultipartPart]) -> "Request":
        if not self.is_multipart:
            raise ValueError(
                "Multipart parts require a multipart request, use Request.multipart()"
            )
        return self._replace(parts=self.parts + tuple(parts))

    def with_text_fields(self, fields: Mapping[str, str]) -> "Request":
        """Append a ``text/plain`` part for every item of ``fields``."""
        return self.with_parts(iter_text_parts(fields))

    def resolve_url(self) -> str:
        return resolve_url(self.target, self.path, self.params)

    def encode_body(self, encoder: JSONEncoder) -> Optional[bytes]:
        """
        Produce the bytes to send. ``None`` means there is no body, which is
        also the case for a multipart request without parts.
        """
        if self.boundary is not None:
            data, _ = encode_multipart_formdata(self.parts, self.boundary)
            return data
        if self.body is None:
            return None
        return self.body.encode(encoder)


class PreparedRequest:
    """
    The transport-level request handed to request interceptors and then to
    the transport: a resolved URL, case-insensitive headers and the final
    encoded body.
    """

    def __init__(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
    ) -> None:
        self.method = method
        self.url = url
        self.headers = HTTPHeaderDict(headers)
        self.body = body

    def copy(self) -> "PreparedRequest":
        return PreparedRequest(self.method, self.url, self.headers.copy(), self.body)

    def __repr__(self) -> str:
        size = "no body" if self.body is None else f"{len(self.body)} bytes"
        return f"<PreparedRequest [{self.method} {self.url}] ({size})>"
