"""Exception hierarchy for the styled QR pipeline.

Everything raised by linkqr derives from :class:`QRRenderError`, so the
application layer can catch one type and omit the QR code instead of failing
a whole page or API response.
"""


class QRRenderError(Exception):
    """Base class for every failure the rendering pipeline can report."""


class InvalidInput(QRRenderError, ValueError):
    """Empty or malformed target string; raised before any encoding work."""


class InvalidColor(InvalidInput):
    """A colour in the render configuration could not be parsed."""


class InvalidMatrix(QRRenderError):
    """The module matrix is empty or not square."""


class InvalidGeometry(QRRenderError):
    """Derived canvas geometry is unusable (non-positive module size)."""


class EncodingCapacityExceeded(QRRenderError):
    """Target string does not fit any symbol version at the chosen ECC level."""


class LogoLoadFailure(QRRenderError):
    """The logo asset exists but could not be decoded.

    Recovered inside the logo compositor; never surfaces from a render.
    """


class EncodingError(QRRenderError):
    """Serialising the final raster produced an empty or malformed data URI."""
