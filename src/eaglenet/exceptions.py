from typing import Callable, Optional, Tuple

# Base Exceptions


class EagleNetError(Exception):
    """Base exception used by this module."""

    pass


class EagleNetWarning(Warning):
    """Base warning used by this module."""

    pass


_TYPE_REDUCE_RESULT = Tuple[Callable[..., object], Tuple[object, ...]]


class LocationValueError(ValueError, EagleNetError):
    """Raised when there is something wrong with a given URL input."""

    pass


class InvalidURL(LocationValueError):
    """Raised when a target, path and query parameters cannot form a valid URL.

    No network activity happens before this is raised.
    """

    def __init__(self, location: object, reason: Optional[str] = None) -> None:
        self.location = location
        self.reason = reason

        message = f"Invalid URL: {location!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (self.location, self.reason)


class EncodingError(EagleNetError):
    """Raised when a request body cannot be serialized.

    The original error is also available as __cause__.
    """

    pass


class TransportError(EagleNetError):
    """Raised when the transport fails to produce a response at all
    (connection refused, timeouts, protocol violations).

    The original error is also available as __cause__.
    """

    pass


class Failure(EagleNetError):
    """Raised when the server answers with a status code outside 2xx.

    :param message:
        Human readable description of the response.
    :param status_code:
        The HTTP status code that was received.
    :param raw_body:
        The undecoded response body, if any.
    """

    def __init__(
        self, message: str, status_code: int, raw_body: Optional[bytes] = None
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.raw_body = raw_body
        super().__init__(f"{status_code}: {message}")

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (self.message, self.status_code, self.raw_body)


class ParsingError(EagleNetError):
    """Raised when a successful response body cannot be decoded.

    :param underlying_error:
        The exception raised by the decoder.
    :param raw_text:
        The response body as UTF-8 text, or an empty string when the
        body is not valid UTF-8.
    """

    def __init__(self, underlying_error: BaseException, raw_text: str) -> None:
        self.underlying_error = underlying_error
        self.raw_text = raw_text
        super().__init__(
            f"Failed to decode response ({underlying_error!r}), raw body: {raw_text!r}"
        )

    def __reduce__(self) -> _TYPE_REDUCE_RESULT:
        # For pickling purposes.
        return self.__class__, (self.underlying_error, self.raw_text)


class ConfigurationWarning(EagleNetWarning):
    """Warned when the default service is replaced after requests were sent."""

    pass
