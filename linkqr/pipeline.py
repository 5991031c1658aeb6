"""Styled QR pipeline: string → module matrix → styled raster → logo → data URI.

Each call allocates its own :class:`~linkqr.surface.RasterSurface` and
threads it through the drawing stages; nothing is shared between calls, so
renders can run concurrently (one per request) without locking.
"""

from typing import Callable

from PIL import Image

from linkqr.config import RenderConfig, parse_color
from linkqr.encode import to_data_uri
from linkqr.errors import InvalidInput
from linkqr.eyes import render_eyes
from linkqr.logging import EventCallback, audit, events, get_logger, trace
from linkqr.logo import LogoProvider, LogoResolver, composite_logo
from linkqr.matrix import ModuleMatrix, encode_matrix
from linkqr.style import compute_geometry, paint_background, render_data_modules
from linkqr.surface import RasterSurface

log = get_logger("pipeline")

# Highest standard tier; leaves room for the centre logo to occlude modules.
ECC_LEVEL = "H"

MatrixEncoder = Callable[[str, str], ModuleMatrix]


class _Configured:
    def __repr__(self):
        return "<configured logo>"


CONFIGURED_LOGO = _Configured()


def profile_url(base_url: str, username: str) -> str:
    return f"{base_url}/profile/{username}"


def render_styled_qr(
    url: str,
    *,
    config: RenderConfig | None = None,
    logo: "Image.Image | LogoProvider | None | _Configured" = CONFIGURED_LOGO,
    encoder: MatrixEncoder = encode_matrix,
) -> Image.Image:
    """Render *url* as a styled QR raster (no encoding to a data URI).

    Args:
        url: Target string; must be non-empty.
        config: Canvas, colour and logo settings. Defaults to ``RenderConfig()``.
        logo: Image, asset provider, or None for no logo. By default a
            :class:`LogoResolver` over ``config.logo_paths``.
        encoder: Matrix producer, called as ``encoder(url, "H")``.

    Raises:
        InvalidInput: *url* is empty or not a string; no encoding is attempted.
        EncodingCapacityExceeded: *url* does not fit any QR version at level H.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInput("QR target must be a non-empty string")

    config = config or RenderConfig()
    colors = config.colors

    matrix = encoder(url, ECC_LEVEL)
    geometry = compute_geometry(matrix.size, config.canvas_size, config.margin, config.dot_scale)

    surface = RasterSurface(config.canvas_size, config.supersample)
    paint_background(surface, parse_color(config.background_inner), parse_color(config.background_outer))
    render_data_modules(surface, matrix, geometry, colors)
    render_eyes(surface, geometry, colors, config.eye_style)

    if logo is CONFIGURED_LOGO:
        logo = LogoResolver(config.logo_paths)
    composite_logo(
        surface,
        config.canvas_size,
        logo,
        logo_size=config.logo_size,
        padding=config.logo_padding,
        fit=config.logo_fit,
        shadow_color=parse_color(config.shadow_color),
        shadow_blur=config.shadow_blur,
        shadow_offset=config.shadow_offset,
        geometry=geometry,
        ecc=ECC_LEVEL,
    )
    return surface.to_image()


def _verify_render(image: Image.Image, url: str) -> None:
    from linkqr.verify import verify

    for sr in verify(image, expected_data=url):
        audit("qr.verify", logger=log,
              decoder=sr.decoder, success=sr.success,
              data=(sr.decoded_data or "")[:80], error=sr.error)


@trace
def generate_styled_qr(
    url: str,
    *,
    config: RenderConfig | None = None,
    logo: "Image.Image | LogoProvider | None | _Configured" = CONFIGURED_LOGO,
    encoder: MatrixEncoder = encode_matrix,
    on_event: EventCallback | None = None,
    verify_scan: bool = False,
) -> str:
    """Render *url* as a branded QR code and return it as a PNG data URI.

    *on_event* receives ``(event, context)`` for every stage of this render.
    With *verify_scan*, the raster is decoded with every available scanner
    and the outcome is audited as ``qr.verify``; a failed scan does not fail
    the render.

    Raises:
        InvalidInput, InvalidColor, EncodingCapacityExceeded, InvalidGeometry,
        EncodingError. Logo problems never raise.
    """
    with events(on_event):
        image = render_styled_qr(url, config=config, logo=logo, encoder=encoder)
        if verify_scan:
            _verify_render(image, url)
        data_uri = to_data_uri(image)
        audit("qr.generated", logger=log, data=url[:80], length=len(data_uri))
        return data_uri


def generate_profile_qr(username: str, base_url: str, **kwargs) -> str:
    """Styled QR for ``{base_url}/profile/{username}``.

    Accepts the same keyword arguments as :func:`generate_styled_qr`.
    """
    target = profile_url(base_url, username)
    log.debug("Generating profile QR for %s -> %s", username, target)
    return generate_styled_qr(target, **kwargs)
