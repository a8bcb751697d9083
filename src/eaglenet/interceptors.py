import inspect
import logging
import threading
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    List,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from .request import PreparedRequest
from .response import ResponseMetadata

__all__ = [
    "InterceptorChain",
    "RequestInterceptor",
    "ResponseInterceptor",
    "run_request_interceptors",
    "run_response_interceptors",
]

log = logging.getLogger(__name__)

_T = TypeVar("_T")
_TYPE_RESPONSE = Tuple[bytes, ResponseMetadata]


class RequestInterceptor:
    """
    Modifies a request before it is sent.

    Subclass and implement :meth:`modify`, which may be a coroutine or a
    plain method. It receives the request produced by the previous
    interceptor and must return the request to pass on::

        class AuthInterceptor(RequestInterceptor):
            def __init__(self, token):
                self.token = token

            async def modify(self, request):
                request.headers["Authorization"] = f"Bearer {self.token}"
                return request

    Any exception raised by :meth:`modify` aborts the call unchanged.
    """

    def modify(
        self, request: PreparedRequest
    ) -> Union[PreparedRequest, Awaitable[PreparedRequest]]:
        raise NotImplementedError()


class ResponseInterceptor:
    """
    Modifies a response body and metadata before classification and decoding.

    :meth:`modify` may be a coroutine or a plain method and must return a
    ``(data, metadata)`` pair.
    """

    def modify(
        self, data: bytes, metadata: ResponseMetadata
    ) -> Union[_TYPE_RESPONSE, Awaitable[_TYPE_RESPONSE]]:
        raise NotImplementedError()


_TYPE_REQUEST_INTERCEPTOR = Union[
    RequestInterceptor,
    Callable[[PreparedRequest], Union[PreparedRequest, Awaitable[PreparedRequest]]],
]
_TYPE_RESPONSE_INTERCEPTOR = Union[
    ResponseInterceptor,
    Callable[
        [bytes, ResponseMetadata], Union[_TYPE_RESPONSE, Awaitable[_TYPE_RESPONSE]]
    ],
]


class InterceptorChain(Generic[_T]):
    """
    An append-only, thread-safe list of interceptors.

    Calls read the chain through :meth:`snapshot`, so a registration that
    races with an in-flight call is either entirely visible to it or not
    at all.
    """

    def __init__(self) -> None:
        self._interceptors: List[_T] = []
        self.lock = threading.Lock()

    def add(self, interceptor: _T) -> None:
        if not (hasattr(interceptor, "modify") or callable(interceptor)):
            raise TypeError(
                f"Expected an interceptor or a callable, got {type(interceptor).__name__}"
            )
        with self.lock:
            self._interceptors.append(interceptor)

    def snapshot(self) -> Tuple[_T, ...]:
        with self.lock:
            return tuple(self._interceptors)

    def __len__(self) -> int:
        with self.lock:
            return len(self._interceptors)


def _resolve(interceptor: Any) -> Callable[..., Any]:
    modify = getattr(interceptor, "modify", None)
    if modify is not None:
        return modify  # type: ignore[no-any-return]
    return interceptor  # type: ignore[no-any-return]


async def _call(interceptor: Any, *args: Any) -> Any:
    result = _resolve(interceptor)(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_request_interceptors(
    interceptors: Sequence[_TYPE_REQUEST_INTERCEPTOR], request: PreparedRequest
) -> PreparedRequest:
    """
    Feed ``request`` through ``interceptors`` in order, each one receiving
    the previous one's result.
    """
    for interceptor in interceptors:
        log.debug("Running request interceptor %r", interceptor)
        request = await _call(interceptor, request)
        if not isinstance(request, PreparedRequest):
            raise TypeError(
                f"Request interceptor {interceptor!r} returned "
                f"{type(request).__name__}, expected PreparedRequest"
            )
    return request


async def run_response_interceptors(
    interceptors: Sequence[_TYPE_RESPONSE_INTERCEPTOR],
    data: bytes,
    metadata: ResponseMetadata,
) -> _TYPE_RESPONSE:
    """
    Feed the ``(data, metadata)`` pair through ``interceptors`` in order.
    """
    for interceptor in interceptors:
        log.debug("Running response interceptor %r", interceptor)
        result = await _call(interceptor, data, metadata)
        try:
            data, metadata = result
        except (TypeError, ValueError):
            raise TypeError(
                f"Response interceptor {interceptor!r} returned "
                f"{type(result).__name__}, expected a (bytes, ResponseMetadata) pair"
            ) from None
        if not isinstance(data, bytes) or not isinstance(metadata, ResponseMetadata):
            raise TypeError(
                f"Response interceptor {interceptor!r} returned "
                f"({type(data).__name__}, {type(metadata).__name__}), "
                "expected a (bytes, ResponseMetadata) pair"
            )
    return data, metadata
