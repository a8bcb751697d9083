import mimetypes
import re
from typing import Mapping, Match, Optional, Union

from .util.util import to_bytes

_TYPE_FIELD_VALUE = Union[str, bytes]


def guess_content_type(filename: str, default: str = "application/octet-stream") -> str:
    """
    Guess the "Content-Type" of a file.

    :param filename:
        The filename to guess the "Content-Type" of using :mod:`mimetypes`.
    :param default:
        If no "Content-Type" can be guessed, default to `default`.
    """
    if filename:
        return mimetypes.guess_type(filename)[0] or default
    return default


_HTML5_REPLACEMENTS = {
    "\u0022": "%22",
    # Replace "\" with "\\".
    "\u005C": "\u005C\u005C",
}

# All control characters from 0x00 to 0x1F *except* 0x1B.
_HTML5_REPLACEMENTS.update(
    {chr(cc): f"%{cc:02X}" for cc in range(0x00, 0x1F + 1) if cc not in (0x1B,)}
)


def _replace_multiple(value: str, needles_and_replacements: Mapping[str, str]) -> str:
    def replacer(match: Match[str]) -> str:
        return needles_and_replacements[match.group(0)]

    pattern = re.compile(
        r"|".join([re.escape(needle) for needle in needles_and_replacements.keys()])
    )

    result = pattern.sub(replacer, value)

    return result


def format_header_param_html5(name: str, value: _TYPE_FIELD_VALUE) -> str:
    """
    Helper function to format and quote a single header parameter using the
    HTML5 strategy.

    Particularly useful for header parameters which might contain
    non-ASCII values, like file names. This follows the `HTML5 Working Draft
    Section 4.10.22.7`_ and matches the behavior of curl and modern browsers.

    .. _HTML5 Working Draft Section 4.10.22.7:
        https://w3c.github.io/html/sec-forms.html#multipart-form-data

    :param name:
        The name of the parameter, a string expected to be ASCII only.
    :param value:
        The value of the parameter, provided as ``bytes`` or `str``.
    :ret:
        A unicode string, stripped of troublesome characters.
    """
    if isinstance(value, bytes):
        value = value.decode("utf-8")

    value = _replace_multiple(value, _HTML5_REPLACEMENTS)

    return f'{name}="{value}"'


class MultipartPart:
    """
    A single named field of a multipart/form-data body.

    Subclasses decide how the field's ``Content-Disposition`` parameters,
    content type and payload look; :meth:`render` turns the part into the
    bytes that sit between two boundary delimiters.
    """

    key: str

    @property
    def content_type(self) -> str:
        raise NotImplementedError()

    @property
    def data(self) -> bytes:
        raise NotImplementedError()

    @property
    def filename(self) -> Optional[str]:
        return None

    def render_headers(self) -> str:
        """
        Renders the headers for this part, followed by the blank line that
        separates them from the payload.
        """
        disposition = "form-data; " + format_header_param_html5("name", self.key)
        if self.filename is not None:
            disposition += "; " + format_header_param_html5("filename", self.filename)

        lines = [
            f"Content-Disposition: {disposition}",
            f"Content-Type: {self.content_type}",
            "\r\n",
        ]
        return "\r\n".join(lines)

    def render(self) -> bytes:
        return self.render_headers().encode("utf-8") + self.data


class FilePart(MultipartPart):
    """
    A file (or any binary payload) uploaded under ``key``.

    :param key:
        The form field name.
    :param file_name:
        The file name announced to the server.
    :param data:
        The raw file contents.
    :param mime_type:
        Content type of the file. When omitted it is guessed from
        ``file_name``, falling back to ``application/octet-stream``.
    """

    def __init__(
        self,
        key: str,
        file_name: str,
        data: Union[bytes, bytearray, memoryview],
        mime_type: Optional[str] = None,
    ) -> None:
        self.key = key
        self.file_name = file_name
        self._data = to_bytes(data)
        self.mime_type = mime_type or guess_content_type(file_name)

    @property
    def content_type(self) -> str:
        return self.mime_type

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def filename(self) -> Optional[str]:
        return self.file_name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilePart):
            return NotImplemented
        return (self.key, self.file_name, self._data, self.mime_type) == (
            other.key,
            other.file_name,
            other._data,
            other.mime_type,
        )

    def __repr__(self) -> str:
        return (
            f"FilePart(key={self.key!r}, file_name={self.file_name!r}, "
            f"size={len(self._data)}, mime_type={self.mime_type!r})"
        )


class TextPart(MultipartPart):
    """A plain text form field, sent UTF-8 encoded."""

    def __init__(self, key: str, value: str, content_type: str = "text/plain") -> None:
        self.key = key
        self.value = value
        self._content_type = content_type

    @property
    def content_type(self) -> str:
        return self._content_type

    @property
    def data(self) -> bytes:
        return to_bytes(self.value, "utf-8")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TextPart):
            return NotImplemented
        return (self.key, self.value, self._content_type) == (
            other.key,
            other.value,
            other._content_type,
        )

    def __repr__(self) -> str:
        return f"TextPart(key={self.key!r}, value={self.value!r})"
