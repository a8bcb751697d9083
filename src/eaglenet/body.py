from typing import TYPE_CHECKING, Any, Optional, Union

from .util.util import to_bytes

if TYPE_CHECKING:
    from .serialization import JSONEncoder

__all__ = ["Body", "RawBody", "EncodableBody", "as_body"]


class Body:
    """
    A request payload: either bytes sent as-is (:class:`RawBody`) or a
    structured value serialized by the service's encoder
    (:class:`EncodableBody`).
    """

    def encode(self, encoder: "JSONEncoder") -> bytes:
        raise NotImplementedError()


class RawBody(Body):
    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        self.data = to_bytes(data)

    def encode(self, encoder: "JSONEncoder") -> bytes:
        return self.data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawBody):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"RawBody({len(self.data)} bytes)"


class EncodableBody(Body):
    def __init__(self, value: Any) -> None:
        self.value = value

    def encode(self, encoder: "JSONEncoder") -> bytes:
        return encoder.encode(self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EncodableBody):
            return NotImplemented
        return bool(self.value == other.value)

    def __repr__(self) -> str:
        return f"EncodableBody({self.value!r})"


def as_body(value: Any) -> Optional[Body]:
    """
    Wrap ``value`` in the matching :class:`Body` variant.

    ``None`` stays ``None``, :class:`Body` instances are returned unchanged,
    bytes-like values become :class:`RawBody` and everything else becomes
    :class:`EncodableBody`.
    """
    if value is None or isinstance(value, Body):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return RawBody(value)
    return EncodableBody(value)
