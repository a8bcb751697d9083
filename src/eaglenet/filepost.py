import uuid
from io import BytesIO
from typing import Iterable, Mapping, Optional, Tuple

from .fields import MultipartPart, TextPart

MULTIPART_FORM_DATA = "multipart/form-data"


def choose_boundary() -> str:
    """
    Generate a boundary token that is unique per request.
    """
    return f"Boundary-{str(uuid.uuid4()).upper()}"


def multipart_content_type(boundary: str) -> str:
    return f"{MULTIPART_FORM_DATA}; boundary={boundary}"


def iter_text_parts(fields: Mapping[str, str]) -> Iterable[TextPart]:
    """
    Iterate over a mapping of plain text form fields as
    :class:`~eaglenet.fields.TextPart` objects, in mapping order.
    """
    for key, value in fields.items():
        yield TextPart(key, value)


def encode_multipart_formdata(
    parts: Iterable[MultipartPart], boundary: Optional[str] = None
) -> Tuple[Optional[bytes], str]:
    """
    Encode ``parts`` using the multipart/form-data MIME format.

    Parts are written in iteration order. Every part is introduced by
    ``--<boundary>`` and the stream is closed by ``--<boundary>--``, with
    CRLF line endings and no trailing line terminator.

    :param parts:
        An iterable of :class:`~eaglenet.fields.MultipartPart`.

    :param boundary:
        If not specified, then a random boundary will be generated using
        :func:`eaglenet.filepost.choose_boundary`.

    :returns:
        ``(body, content_type)``. ``body`` is ``None`` when ``parts`` is
        empty; there is nothing to send in that case, not an empty stream.
    """
    body = BytesIO()
    if boundary is None:
        boundary = choose_boundary()

    for part in parts:
        body.write(f"--{boundary}\r\n".encode("latin-1"))
        body.write(part.render())
        body.write(b"\r\n")

    content_type = multipart_content_type(boundary)

    if not body.tell():
        return None, content_type

    body.write(f"--{boundary}--".encode("latin-1"))

    return body.getvalue(), content_type
