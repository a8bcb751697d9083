"""
Async HTTP client with interceptor chains, typed JSON decoding and multipart uploads with progress
"""

# Set default logging handler to avoid "No handler found" warnings.
import logging
import warnings
from logging import NullHandler
from typing import Any, Iterable, Mapping, Optional, TextIO, Type

from . import exceptions
from ._collections import HTTPHeaderDict
from ._version import __version__
from .body import EncodableBody, RawBody
from .exceptions import (
    EncodingError,
    Failure,
    InvalidURL,
    ParsingError,
    TransportError,
)
from .fields import FilePart, MultipartPart, TextPart
from .filepost import encode_multipart_formdata
from .interceptors import (
    _TYPE_REQUEST_INTERCEPTOR,
    _TYPE_RESPONSE_INTERCEPTOR,
    RequestInterceptor,
    ResponseInterceptor,
)
from .request import ContentType, HTTPMethod, PreparedRequest, Request
from .response import ResponseMetadata
from .serialization import JSONDecoder, JSONEncoder
from .service import NetworkService
from .transport import BaseTransport, HTTPXTransport, ProgressHandler
from .util.url import _TYPE_TARGET

__license__ = "MIT"
__version__ = __version__

__all__ = (
    "BaseTransport",
    "ContentType",
    "EncodableBody",
    "EncodingError",
    "Failure",
    "FilePart",
    "HTTPHeaderDict",
    "HTTPMethod",
    "HTTPXTransport",
    "InvalidURL",
    "JSONDecoder",
    "JSONEncoder",
    "MultipartPart",
    "NetworkService",
    "ParsingError",
    "PreparedRequest",
    "RawBody",
    "Request",
    "RequestInterceptor",
    "ResponseInterceptor",
    "ResponseMetadata",
    "TextPart",
    "TransportError",
    "add_request_interceptor",
    "add_response_interceptor",
    "add_stderr_logger",
    "configure",
    "custom",
    "delete",
    "disable_warnings",
    "encode_multipart_formdata",
    "execute",
    "execute_upload",
    "get",
    "post",
    "put",
    "upload",
)

logging.getLogger(__name__).addHandler(NullHandler())


def add_stderr_logger(level: int = logging.DEBUG) -> "logging.StreamHandler[TextIO]":
    """
    Helper for quickly adding a StreamHandler to the logger. Useful for
    debugging.

    Returns the handler after adding it.
    """
    # This method needs to be in this __init__.py to get the __name__ correct
    # even if eaglenet is vendored within another package.
    logger = logging.getLogger(__name__)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.debug("Added a stderr logging handler to logger: %s", __name__)
    return handler


# ... Clean up.
del NullHandler


# ConfigurationWarnings point at a real ordering mistake, show each one once.
warnings.simplefilter("default", exceptions.ConfigurationWarning, append=True)


def disable_warnings(category: Type[Warning] = exceptions.EagleNetWarning) -> None:
    """
    Helper for quickly disabling all eaglenet warnings.
    """
    warnings.simplefilter("ignore", category)


_DEFAULT_SERVICE = NetworkService()


def configure(service: NetworkService) -> None:
    """
    Replace the module-global service used by the top-level functions.

    Do this once at startup. Replacing a service that has already sent
    requests emits a :class:`~eaglenet.exceptions.ConfigurationWarning`;
    the old service is not closed.
    """
    global _DEFAULT_SERVICE

    if not isinstance(service, NetworkService):
        raise TypeError(f"Expected a NetworkService, got {type(service).__name__}")
    if _DEFAULT_SERVICE.num_requests:
        warnings.warn(
            "The default service was replaced after it had already sent "
            f"{_DEFAULT_SERVICE.num_requests} request(s). Call configure() "
            "before issuing any requests.",
            exceptions.ConfigurationWarning,
            stacklevel=2,
        )
    _DEFAULT_SERVICE = service


def add_request_interceptor(interceptor: _TYPE_REQUEST_INTERCEPTOR) -> None:
    _DEFAULT_SERVICE.add_request_interceptor(interceptor)


def add_response_interceptor(interceptor: _TYPE_RESPONSE_INTERCEPTOR) -> None:
    _DEFAULT_SERVICE.add_response_interceptor(interceptor)


async def execute(request: Request, response_type: Any = None) -> Any:
    """
    A convenience, top-level entry point. It uses a module-global
    ``NetworkService`` instance, so interceptors registered on it are shared
    with every other user of the top-level functions. To avoid side effects
    create a new ``NetworkService`` instance and use it instead.
    """
    return await _DEFAULT_SERVICE.execute(request, response_type=response_type)


async def execute_upload(
    request: Request,
    response_type: Any = None,
    progress: Optional[ProgressHandler] = None,
) -> Any:
    return await _DEFAULT_SERVICE.execute_upload(
        request, response_type=response_type, progress=progress
    )


async def get(
    target: _TYPE_TARGET,
    path: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, str]] = None,
    body: Any = None,
    response_type: Any = None,
) -> Any:
    return await _DEFAULT_SERVICE.get(
        target, path, headers, params, body, response_type
    )


async def post(
    target: _TYPE_TARGET,
    path: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, str]] = None,
    body: Any = None,
    response_type: Any = None,
) -> Any:
    return await _DEFAULT_SERVICE.post(
        target, path, headers, params, body, response_type
    )


async def put(
    target: _TYPE_TARGET,
    path: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, str]] = None,
    body: Any = None,
    response_type: Any = None,
) -> Any:
    return await _DEFAULT_SERVICE.put(
        target, path, headers, params, body, response_type
    )


async def delete(
    target: _TYPE_TARGET,
    path: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, str]] = None,
    body: Any = None,
    response_type: Any = None,
) -> Any:
    return await _DEFAULT_SERVICE.delete(
        target, path, headers, params, body, response_type
    )


async def custom(
    method: str,
    target: _TYPE_TARGET,
    path: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, str]] = None,
    body: Any = None,
    response_type: Any = None,
) -> Any:
    return await _DEFAULT_SERVICE.custom(
        method, target, path, headers, params, body, response_type
    )


async def upload(
    target: _TYPE_TARGET,
    path: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, str]] = None,
    parts: Iterable[MultipartPart] = (),
    progress: Optional[ProgressHandler] = None,
    response_type: Any = None,
    method: str = HTTPMethod.POST,
) -> Any:
    return await _DEFAULT_SERVICE.upload(
        target,
        path,
        headers,
        params,
        parts,
        progress=progress,
        response_type=response_type,
        method=method,
    )
