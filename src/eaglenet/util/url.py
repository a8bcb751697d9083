import re
from typing import Mapping, NamedTuple, Optional, Union
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from ..exceptions import InvalidURL

# Regex for detecting URLs with schemes. RFC 3986 Section 3.1
SCHEME_REGEX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+\-.]*:")

# Characters allowed to appear unencoded in a path segment, plus the segment
# separator and the percent sign so existing escapes survive.
PATH_SAFE_CHARS = "/:@!$&'()*+,;=-._~%"

# C0 controls, space and DEL are never valid anywhere in a target. urlsplit
# silently drops tab and newline, so they are checked before splitting.
_UNSAFE_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")

IPV4_PAT = r"(?:[0-9]{1,3}\.){3}[0-9]{1,3}"

HEX_PAT = "[0-9A-Fa-f]{1,4}"
LS32_PAT = "(?:{hex}:{hex}|{ipv4})".format(hex=HEX_PAT, ipv4=IPV4_PAT)
_subs = {"hex": HEX_PAT, "ls32": LS32_PAT}
_variations = [
    #                            6( h16 ":" ) ls32
    "(?:%(hex)s:){6}%(ls32)s",
    #                       "::" 5( h16 ":" ) ls32
    "::(?:%(hex)s:){5}%(ls32)s",
    # [               h16 ] "::" 4( h16 ":" ) ls32
    "(?:%(hex)s)?::(?:%(hex)s:){4}%(ls32)s",
    # [ *1( h16 ":" ) h16 ] "::" 3( h16 ":" ) ls32
    "(?:(?:%(hex)s:)?%(hex)s)?::(?:%(hex)s:){3}%(ls32)s",
    # [ *2( h16 ":" ) h16 ] "::" 2( h16 ":" ) ls32
    "(?:(?:%(hex)s:){0,2}%(hex)s)?::(?:%(hex)s:){2}%(ls32)s",
    # [ *3( h16 ":" ) h16 ] "::"    h16 ":"   ls32
    "(?:(?:%(hex)s:){0,3}%(hex)s)?::%(hex)s:%(ls32)s",
    # [ *4( h16 ":" ) h16 ] "::"              ls32
    "(?:(?:%(hex)s:){0,4}%(hex)s)?::%(ls32)s",
    # [ *5( h16 ":" ) h16 ] "::"              h16
    "(?:(?:%(hex)s:){0,5}%(hex)s)?::%(hex)s",
    # [ *6( h16 ":" ) h16 ] "::"
    "(?:(?:%(hex)s:){0,6}%(hex)s)?::",
]

UNRESERVED_PAT = r"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789._\-~"
SUB_DELIMS_PAT = r"!$&'()*+,;="
IPV6_PAT = "(?:" + "|".join([x % _subs for x in _variations]) + ")"
ZONE_ID_PAT = "(?:%25|%)(?:[" + UNRESERVED_PAT + "]|%[a-fA-F0-9]{2})+"
IPV6_ADDRZ_PAT = r"\[" + IPV6_PAT + r"(?:" + ZONE_ID_PAT + r")?\]"
# RFC 3986 Section 3.2.2, reg-name: unreserved / pct-encoded / sub-delims
REG_NAME_PAT = (
    "(?:[" + UNRESERVED_PAT + re.escape(SUB_DELIMS_PAT) + "]|%[a-fA-F0-9]{2})+"
)

IPV6_ADDRZ_RE = re.compile("^" + IPV6_ADDRZ_PAT + "$")
REG_NAME_RE = re.compile("^" + REG_NAME_PAT + "$")


def _is_valid_host(host: str) -> bool:
    if host.startswith("["):
        return IPV6_ADDRZ_RE.match(host) is not None
    return REG_NAME_RE.match(host) is not None


_TYPE_TARGET = Union[str, "Url"]


class Url(
    NamedTuple(
        "Url",
        [
            ("scheme", Optional[str]),
            ("auth", Optional[str]),
            ("host", Optional[str]),
            ("port", Optional[int]),
            ("path", Optional[str]),
            ("query", Optional[str]),
            ("fragment", Optional[str]),
        ],
    )
):
    """
    Data structure for representing an HTTP URL. Used as a return value for
    :func:`parse_url`. Both the scheme and host are normalized as they are
    both case-insensitive according to RFC 3986.
    """

    def __new__(  # type: ignore[no-untyped-def]
        cls,
        scheme: Optional[str] = None,
        auth: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        path: Optional[str] = None,
        query: Optional[str] = None,
        fragment: Optional[str] = None,
    ):
        if scheme is not None:
            scheme = scheme.lower()
        if host is not None:
            host = host.lower()
        return super().__new__(cls, scheme, auth, host, port, path, query, fragment)

    @property
    def netloc(self) -> Optional[str]:
        """Network location including auth, host and port"""
        if self.host is None:
            return None
        host = self.host
        if ":" in host:
            host = f"[{host}]"
        if self.port is not None:
            host = f"{host}:{self.port}"
        if self.auth is not None:
            host = f"{self.auth}@{host}"
        return host

    @property
    def url(self) -> str:
        """
        Convert self into a url

        This function should more or less round-trip with :func:`.parse_url`.

        Example: ::

            >>> U = parse_url("https://api.example.com/users?page=1")
            >>> U.url
            'https://api.example.com/users?page=1'
        """
        return urlunsplit(
            SplitResult(
                self.scheme or "",
                self.netloc or "",
                self.path or "",
                self.query or "",
                self.fragment or "",
            )
        )

    def __str__(self) -> str:
        return self.url


def parse_url(target: _TYPE_TARGET) -> Url:
    """
    Given a target, return a parsed :class:`.Url` namedtuple.

    Unlike a best-effort parser, a target must name both a scheme and a
    host to be usable as a request address; anything else raises
    :class:`~eaglenet.exceptions.InvalidURL`.

    Example::

        >>> parse_url("http://example.com:8080/mail/")
        Url(scheme='http', auth=None, host='example.com', port=8080, path='/mail/', ...)
        >>> parse_url("example.com/mail")
        Traceback (most recent call last):
            ...
        eaglenet.exceptions.InvalidURL: Invalid URL: 'example.com/mail' (missing scheme)
    """
    if isinstance(target, Url):
        target = target.url
    if not isinstance(target, str):
        raise InvalidURL(target, f"not expecting type {type(target).__name__}")
    if not target:
        raise InvalidURL(target, "empty")
    if not SCHEME_REGEX.match(target):
        raise InvalidURL(target, "missing scheme")
    if _UNSAFE_CHARS_RE.search(target):
        raise InvalidURL(target, "contains whitespace or control characters")

    try:
        split = urlsplit(target)
        port = split.port
    except ValueError as e:
        raise InvalidURL(target, str(e)) from e

    if not split.hostname:
        raise InvalidURL(target, "missing host")

    host = split.netloc.rpartition("@")[2]
    if host.startswith("["):
        host = host[: host.find("]") + 1]
    else:
        host = host.partition(":")[0]
    if not _is_valid_host(host):
        raise InvalidURL(target, f"invalid host {host!r}")

    auth = None
    if "@" in split.netloc:
        auth = split.netloc.rpartition("@")[0]

    return Url(
        scheme=split.scheme,
        auth=auth,
        host=split.hostname,
        port=port,
        path=split.path or None,
        query=split.query or None,
        fragment=split.fragment or None,
    )


def encode_query(params: Mapping[str, str]) -> str:
    """Percent-encode ``params`` as ``key=value`` pairs joined by ``&``."""
    return "&".join(
        f"{quote(str(key), safe='')}={quote(str(value), safe='')}"
        for key, value in params.items()
    )


def resolve_url(
    target: _TYPE_TARGET,
    path: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Combine ``target``, an optional ``path`` suffix and optional query
    ``params`` into a single request URL.

    :param target:
        The base endpoint, a string or a :class:`Url`.
    :param path:
        Appended verbatim to the target's path; the caller is responsible
        for the leading ``/``. Characters not allowed in a path are
        percent-encoded.
    :param params:
        Appended to any query string already present on ``target``. Keys
        already present are not replaced, both pairs are sent.

    :raises InvalidURL:
        When ``target`` cannot be parsed, or when the combined components
        do not form a URL.
    """
    url = parse_url(target)

    new_path = url.path or ""
    if path:
        new_path += quote(path, safe=PATH_SAFE_CHARS)
        if not new_path.startswith("/"):
            raise InvalidURL(
                f"{url.url}{path}", "path must start with '/' when a host is present"
            )

    query = url.query
    if params:
        extra = encode_query(params)
        query = f"{query}&{extra}" if query else extra

    return url._replace(path=new_path or None, query=query).url
