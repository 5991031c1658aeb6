"""Encoder: serialise the finished raster into an embeddable PNG data URI."""

import base64
import binascii
import io

from PIL import Image

from linkqr.errors import EncodingError
from linkqr.logging import audit, get_logger, trace

log = get_logger("encode")

DATA_URI_PREFIX = "data:image/png;base64,"


def validate_data_uri(data_uri: str) -> str:
    """Return *data_uri* unchanged if it is a non-empty image data URI, else raise EncodingError."""
    if not data_uri or not data_uri.startswith("data:image") or len(data_uri) <= len(DATA_URI_PREFIX):
        raise EncodingError("QR image encoding returned an empty or malformed data URI")
    return data_uri


@trace
def to_data_uri(image: Image.Image) -> str:
    buf = io.BytesIO()
    try:
        image.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodingError(f"Could not encode QR raster as PNG: {exc}") from exc

    data_uri = DATA_URI_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")
    validate_data_uri(data_uri)
    audit("qr.encoded", logger=log, png_bytes=buf.tell(), length=len(data_uri))
    return data_uri


def from_data_uri(data_uri: str) -> Image.Image:
    """Decode a PNG data URI back into an image (for verification and previews)."""
    validate_data_uri(data_uri)
    _, _, payload = data_uri.partition(",")
    try:
        raw = base64.b64decode(payload, validate=True)
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (binascii.Error, OSError) as exc:
        raise EncodingError(f"Data URI does not hold a decodable image: {exc}") from exc
    return img
