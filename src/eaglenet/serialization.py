import json as _json
from functools import lru_cache
from typing import Any, Callable, Optional

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

from .exceptions import EncodingError

__all__ = ["JSONEncoder", "JSONDecoder"]


@lru_cache(maxsize=128)
def _type_adapter(response_type: Any) -> "TypeAdapter[Any]":
    return TypeAdapter(response_type)


class JSONEncoder:
    """
    Serializes request bodies to UTF-8 JSON.

    :param sort_keys:
        Emit object keys in sorted order.
    :param ensure_ascii:
        Escape every non-ASCII character instead of writing it as UTF-8.
    :param default:
        Called for objects :mod:`json` cannot serialize natively. The default
        understands pydantic models, dataclasses, datetimes, UUIDs and the
        other types :func:`pydantic_core.to_jsonable_python` supports.
    """

    def __init__(
        self,
        sort_keys: bool = False,
        ensure_ascii: bool = False,
        default: Optional[Callable[[Any], Any]] = to_jsonable_python,
    ) -> None:
        self.sort_keys = sort_keys
        self.ensure_ascii = ensure_ascii
        self.default = default

    def encode(self, value: Any) -> bytes:
        """
        Serialize ``value``.

        :raises EncodingError: if ``value`` is not JSON serializable.
        """
        try:
            return _json.dumps(
                value,
                separators=(",", ":"),
                sort_keys=self.sort_keys,
                ensure_ascii=self.ensure_ascii,
                default=self.default,
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodingError(
                f"Failed to encode {type(value).__name__} body as JSON: {e}"
            ) from e


class JSONDecoder:
    """
    Parses response bodies as JSON and, when a ``response_type`` is given,
    validates the result into that type with :class:`pydantic.TypeAdapter`.
    """

    def decode(self, data: bytes, response_type: Any = None) -> Any:
        """
        This method can raise `UnicodeDecodeError`, `json.JSONDecodeError` or
        `pydantic.ValidationError`.
        """
        value = _json.loads(data.decode("utf-8"))
        if response_type is None or response_type is Any:
            return value
        return _type_adapter(response_type).validate_python(value)
