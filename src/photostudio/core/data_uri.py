"""Data URI encoding and decoding helpers.

Images travel between the browser and the gateway as base64 data URIs
(``data:image/png;base64,iVBOR...``).  The gateway decodes them into raw bytes
plus a MIME type before handing them to the provider, and re-encodes the
provider's inline image bytes on the way back.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path

# data:[<mime>][;param=value]*;base64,<payload>
_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[^;,]*)*?),(?P<payload>.*)$",
    re.DOTALL,
)

DEFAULT_MIME_TYPE = "image/png"


class DataURIError(ValueError):
    """Raised when a string cannot be decoded as a base64 data URI."""


@dataclass(frozen=True)
class DecodedImage:
    """Raw image bytes together with their declared MIME type."""

    data: bytes
    mime_type: str


def is_data_uri(value: str) -> bool:
    """Return ``True`` if *value* looks like a data URI."""
    return isinstance(value, str) and value.startswith("data:")


def parse_data_uri(value: str) -> DecodedImage:
    """Decode a base64 data URI into bytes and MIME type.

    Args:
        value: String of the form ``data:<mime>;base64,<payload>``.

    Returns:
        The decoded image.  A missing MIME declaration falls back to
        ``image/png``.

    Raises:
        DataURIError: If *value* is not a data URI, is not base64 encoded,
            or carries an empty or corrupt payload.
    """
    if not is_data_uri(value):
        raise DataURIError("Expected a base64 data URI.")

    match = _DATA_URI_RE.match(value)
    if match is None:
        raise DataURIError("Malformed data URI.")

    params = [p.strip().lower() for p in match.group("params").split(";") if p.strip()]
    if "base64" not in params:
        raise DataURIError("Data URI must be base64 encoded.")

    payload = match.group("payload").strip()
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DataURIError("Data URI payload is not valid base64.") from e

    if not data:
        raise DataURIError("Data URI payload is empty.")

    return DecodedImage(data=data, mime_type=match.group("mime") or DEFAULT_MIME_TYPE)


def encode_data_uri(data: bytes, mime_type: str | None = None) -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{encoded}"


def guess_mime_type(path: Path) -> str:
    """Guess an image MIME type from a file extension."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or DEFAULT_MIME_TYPE
