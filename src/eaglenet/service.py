import logging
from types import TracebackType
from typing import Any, Iterable, Mapping, Optional, Type

from .exceptions import Failure, ParsingError
from .fields import MultipartPart
from .interceptors import (
    _TYPE_REQUEST_INTERCEPTOR,
    _TYPE_RESPONSE_INTERCEPTOR,
    InterceptorChain,
    run_request_interceptors,
    run_response_interceptors,
)
from .request import HTTPMethod, PreparedRequest, Request
from .response import ResponseMetadata
from .serialization import JSONDecoder, JSONEncoder
from .transport import BaseTransport, HTTPXTransport, ProgressHandler
from .util.url import _TYPE_TARGET
from .util.util import to_str

__all__ = ["NetworkService"]

log = logging.getLogger(__name__)


class NetworkService:
    """
    Executes :class:`~eaglenet.request.Request` objects.

    Every call runs the same pipeline: resolve the URL and encode the body,
    run the request interceptors, send through the transport, run the
    response interceptors, then classify the status code and decode the
    body. Nothing is retried.

    :param transport:
        Sends prepared requests. Defaults to a new
        :class:`~eaglenet.transport.HTTPXTransport`.
    :param encoder:
        Serializes structured request bodies.
    :param decoder:
        Decodes successful response bodies.

    Example::

        >>> async with NetworkService() as service:
        ...     service.add_request_interceptor(AuthInterceptor(token))
        ...     user = await service.get(
        ...         "https://api.example.com", "/users/1", response_type=User
        ...     )
    """

    def __init__(
        self,
        transport: Optional[BaseTransport] = None,
        encoder: Optional[JSONEncoder] = None,
        decoder: Optional[JSONDecoder] = None,
    ) -> None:
        self.transport = transport if transport is not None else HTTPXTransport()
        self.encoder = encoder if encoder is not None else JSONEncoder()
        self.decoder = decoder if decoder is not None else JSONDecoder()

        self.request_interceptors: InterceptorChain[
            _TYPE_REQUEST_INTERCEPTOR
        ] = InterceptorChain()
        self.response_interceptors: InterceptorChain[
            _TYPE_RESPONSE_INTERCEPTOR
        ] = InterceptorChain()

        #: Number of requests handed to the transport so far.
        self.num_requests = 0

    async def __aenter__(self) -> "NetworkService":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    def add_request_interceptor(self, interceptor: _TYPE_REQUEST_INTERCEPTOR) -> None:
        """Append ``interceptor``; it runs after those already registered."""
        self.request_interceptors.add(interceptor)

    def add_response_interceptor(
        self, interceptor: _TYPE_RESPONSE_INTERCEPTOR
    ) -> None:
        """Append ``interceptor``; it runs after those already registered."""
        self.response_interceptors.add(interceptor)

    async def execute(self, request: Request, response_type: Any = None) -> Any:
        """
        Send ``request`` as a plain exchange and return the decoded body.

        :param response_type:
            Type to validate the decoded JSON into. ``None`` returns the
            parsed JSON as-is.

        :raises InvalidURL: the URL could not be built; nothing was sent.
        :raises EncodingError: the body could not be encoded; nothing was sent.
        :raises TransportError: no response was received.
        :raises Failure: the response status was not 2xx.
        :raises ParsingError: a 2xx body could not be decoded.
        """
        prepared = await self._prepare(request)

        log.debug("%s %s", prepared.method, prepared.url)
        self.num_requests += 1
        data, metadata = await self.transport.send(prepared)

        return await self._finish(data, metadata, response_type)

    async def execute_upload(
        self,
        request: Request,
        response_type: Any = None,
        progress: Optional[ProgressHandler] = None,
    ) -> Any:
        """
        Like :meth:`execute`, but the final body is streamed separately from
        the request and ``progress(bytes_sent, total_expected)`` is called
        as it goes out.
        """
        prepared = await self._prepare(request)

        body = prepared.body if prepared.body is not None else b""
        prepared.body = None

        log.debug("%s %s (upload, %d bytes)", prepared.method, prepared.url, len(body))
        self.num_requests += 1
        data, metadata = await self.transport.upload(prepared, body, progress)

        return await self._finish(data, metadata, response_type)

    async def _prepare(self, request: Request) -> PreparedRequest:
        prepared = self._build_request(request)
        return await run_request_interceptors(
            self.request_interceptors.snapshot(), prepared
        )

    async def _finish(
        self, data: bytes, metadata: ResponseMetadata, response_type: Any
    ) -> Any:
        log.debug('"%s" %d bytes', metadata, len(data))
        data, metadata = await run_response_interceptors(
            self.response_interceptors.snapshot(), data, metadata
        )
        return self._handle_response(data, metadata, response_type)

    def _build_request(self, request: Request) -> PreparedRequest:
        url = request.resolve_url()

        prepared = PreparedRequest(request.method, url, request.headers)
        if "Content-Type" not in prepared.headers:
            prepared.headers["Content-Type"] = request.content_type

        prepared.body = request.encode_body(self.encoder)
        return prepared

    def _handle_response(
        self, data: bytes, metadata: ResponseMetadata, response_type: Any
    ) -> Any:
        if not metadata.is_success:
            assert metadata.status is not None
            raise Failure(str(metadata), metadata.status, data)

        try:
            return self.decoder.decode(data, response_type)
        except ValueError as e:
            try:
                raw_text = to_str(data, "utf-8")
            except UnicodeDecodeError:
                raw_text = ""
            raise ParsingError(e, raw_text) from e

    async def request(
        self,
        method: str,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        body: Any = None,
        response_type: Any = None,
    ) -> Any:
        """
        Build a :class:`~eaglenet.request.Request` from the arguments and
        :meth:`execute` it.
        """
        return await self.execute(
            Request(
                target,
                path=path,
                method=method,
                headers=headers or {},
                params=params or {},
                body=body,
            ),
            response_type=response_type,
        )

    async def get(
        self,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        body: Any = None,
        response_type: Any = None,
    ) -> Any:
        return await self.request(
            HTTPMethod.GET, target, path, headers, params, body, response_type
        )

    async def post(
        self,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        body: Any = None,
        response_type: Any = None,
    ) -> Any:
        return await self.request(
            HTTPMethod.POST, target, path, headers, params, body, response_type
        )

    async def put(
        self,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        body: Any = None,
        response_type: Any = None,
    ) -> Any:
        return await self.request(
            HTTPMethod.PUT, target, path, headers, params, body, response_type
        )

    async def delete(
        self,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        body: Any = None,
        response_type: Any = None,
    ) -> Any:
        return await self.request(
            HTTPMethod.DELETE, target, path, headers, params, body, response_type
        )

    async def custom(
        self,
        method: str,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        body: Any = None,
        response_type: Any = None,
    ) -> Any:
        """Same as the verb helpers, for any method token such as ``PATCH``."""
        return await self.request(
            HTTPMethod.custom(method),
            target,
            path,
            headers,
            params,
            body,
            response_type,
        )

    async def upload(
        self,
        target: _TYPE_TARGET,
        path: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        parts: Iterable[MultipartPart] = (),
        progress: Optional[ProgressHandler] = None,
        response_type: Any = None,
        method: str = HTTPMethod.POST,
    ) -> Any:
        """
        Send ``parts`` as a multipart/form-data body through
        :meth:`execute_upload`.

        Example::

            >>> await service.upload(
            ...     "https://api.example.com",
            ...     "/upload",
            ...     parts=[
            ...         FilePart("avatar", "profile.jpg", image_data, "image/jpeg"),
            ...         TextPart("username", "anbu"),
            ...     ],
            ...     progress=lambda sent, total: print(f"{sent}/{total}"),
            ... )
        """
        request = Request.multipart(
            target,
            path=path,
            method=method,
            headers=headers,
            params=params,
            parts=parts,
        )
        return await self.execute_upload(
            request, response_type=response_type, progress=progress
        )
