from .url import Url, encode_query, parse_url, resolve_url
from .util import to_bytes, to_str

__all__ = (
    "Url",
    "encode_query",
    "parse_url",
    "resolve_url",
    "to_bytes",
    "to_str",
)
