import logging
from types import TracebackType
from typing import Any, AsyncIterator, Callable, Optional, Tuple, Type, Union

import httpx

from ._collections import HTTPHeaderDict
from .exceptions import InvalidURL, TransportError
from .request import PreparedRequest
from .response import ResponseMetadata

__all__ = ["BaseTransport", "HTTPXTransport", "ProgressHandler"]

log = logging.getLogger(__name__)

#: Called as ``progress(bytes_sent, total_expected)`` while an upload body
#: is being sent.
ProgressHandler = Callable[[int, int], None]

_TYPE_RESPONSE = Tuple[bytes, ResponseMetadata]

DEFAULT_TIMEOUT = 30.0
# Default value for `blocksize`, same as http.client's.
_DEFAULT_BLOCKSIZE = 16384


class BaseTransport:
    """
    Sends a fully prepared request and returns the raw response.

    Implementations produce exactly one outcome per call: a
    ``(data, metadata)`` pair or an exception.
    """

    async def send(self, request: PreparedRequest) -> _TYPE_RESPONSE:
        raise NotImplementedError()

    async def upload(
        self,
        request: PreparedRequest,
        body: bytes,
        progress: Optional[ProgressHandler] = None,
    ) -> _TYPE_RESPONSE:
        raise NotImplementedError()

    async def aclose(self) -> None:
        pass

    async def __aenter__(self) -> "BaseTransport":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()


class HTTPXTransport(BaseTransport):
    """
    Transport backed by :class:`httpx.AsyncClient`.

    :param client:
        An existing client to send requests with. It is not closed by
        :meth:`aclose`. When omitted a client is created with ``timeout``
        and ``client_kw`` and owned by this transport.
    :param timeout:
        Timeout in seconds, or an :class:`httpx.Timeout`.
    :param blocksize:
        Size of the chunks an upload body is streamed in; progress is
        reported once per chunk.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Union[float, httpx.Timeout, None] = DEFAULT_TIMEOUT,
        blocksize: int = _DEFAULT_BLOCKSIZE,
        **client_kw: Any,
    ) -> None:
        if blocksize <= 0:
            raise ValueError(f"blocksize must be positive, got {blocksize}")
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=timeout, **client_kw)
        self.client = client
        self.blocksize = blocksize

    async def send(self, request: PreparedRequest) -> _TYPE_RESPONSE:
        return await self._request(request, request.body, request.headers)

    async def upload(
        self,
        request: PreparedRequest,
        body: bytes,
        progress: Optional[ProgressHandler] = None,
    ) -> _TYPE_RESPONSE:
        headers = request.headers.copy()
        # An explicit length keeps httpx from switching to chunked encoding.
        headers["Content-Length"] = str(len(body))
        return await self._request(
            request, self._stream_body(body, progress), headers
        )

    async def _stream_body(
        self, body: bytes, progress: Optional[ProgressHandler]
    ) -> AsyncIterator[bytes]:
        total = len(body)
        sent = 0
        for start in range(0, total, self.blocksize):
            chunk = body[start : start + self.blocksize]
            yield chunk
            # Resumed only once the transport asks for more, so the chunk
            # has been handed off.
            sent += len(chunk)
            if progress is not None:
                progress(sent, total)

    async def _request(
        self,
        request: PreparedRequest,
        content: Union[bytes, AsyncIterator[bytes], None],
        headers: HTTPHeaderDict,
    ) -> _TYPE_RESPONSE:
        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=list(headers.iteritems()),
                content=content,
            )
        except httpx.InvalidURL as e:
            raise InvalidURL(request.url, str(e)) from e
        except httpx.RequestError as e:
            log.debug("%s %s failed: %r", request.method, request.url, e)
            raise TransportError(
                f"{request.method} {request.url} failed: {e!r}"
            ) from e

        metadata = ResponseMetadata(
            status=response.status_code,
            headers=HTTPHeaderDict(response.headers.multi_items()),
            reason=response.reason_phrase,
            url=str(response.url),
            http_version=response.http_version,
        )
        return response.content, metadata

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
