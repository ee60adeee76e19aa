"""Helpers for image payloads exchanged as data URIs."""

import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidImageError

DEFAULT_INPUT_MIME = "image/jpeg"

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.-]+)*;base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes with their MIME type."""

    mime_type: str
    data: bytes


def parse_data_uri(uri: str) -> ImagePayload:
    """Decode a base64 data URI into an ImagePayload.

    A bare base64 string (no ``data:`` prefix) is accepted and treated
    as JPEG.

    Raises:
        InvalidImageError: If the payload is empty or not valid base64.
    """
    uri = uri.strip()
    match = _DATA_URI_RE.match(uri)
    if match:
        mime_type = match.group("mime") or DEFAULT_INPUT_MIME
        encoded = match.group("data")
    elif uri.startswith("data:"):
        raise InvalidImageError("Only base64 data URIs are supported")
    else:
        mime_type = DEFAULT_INPUT_MIME
        encoded = uri

    if not encoded:
        raise InvalidImageError("Image payload is empty")

    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Image payload is not valid base64: {e}") from e

    return ImagePayload(mime_type=mime_type, data=data)


def to_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """Encode raw image bytes as a data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def load_image_file(path: str | Path) -> str:
    """Read an image file and return it as a data URI.

    Raises:
        InvalidImageError: If the file is missing, unreadable or not an image.
    """
    path = Path(path).expanduser()
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None or not mime_type.startswith("image/"):
        raise InvalidImageError(f"Not an image file: {path}")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise InvalidImageError(f"Cannot read {path}: {e}") from e

    if not data:
        raise InvalidImageError(f"Image file is empty: {path}")

    return to_data_uri(data, mime_type)
