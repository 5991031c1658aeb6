"""Eye renderer: branded replacements for the three 7x7 finder patterns."""

from dataclasses import dataclass

from linkqr.logging import audit, get_logger, trace
from linkqr.surface import WHITE, Gradient, RasterSurface

log = get_logger("eyes")

EYE_MODULES = 7


@dataclass(frozen=True)
class EyeStyle:
    """Proportions of the nested eye glyph, relative to the full eye size.

    inner_ratio:  side of the white square / eye size
    outer_radius: corner radius of the outer square / eye size
    inner_radius: corner radius of the white square / eye size
    dot_ratio:    side of the centre dot / white square side
    dot_radius:   corner radius of the centre dot / dot side
    """
    inner_ratio: float = 0.43
    outer_radius: float = 0.25
    inner_radius: float = 0.15
    dot_ratio: float = 0.6
    dot_radius: float = 0.3

    @classmethod
    def finder(cls) -> "EyeStyle":
        """Rounded glyph that keeps the exact 1:1:3:1:1 finder ratio.

        The bare ``EyeStyle()`` glyph has a two-module outer ring that
        line-ratio decoders reject, so :class:`~linkqr.config.RenderConfig`
        renders with this preset unless told otherwise.
        """
        return cls(inner_ratio=5 / 7)


def eye_origins(module_count: int) -> list[tuple[int, int]]:
    """(x, y) module origins of the top-left, top-right and bottom-left eyes."""
    far = module_count - EYE_MODULES
    return [(0, 0), (far, 0), (0, far)]


def is_eye_module(x: int, y: int, module_count: int) -> bool:
    far = module_count - EYE_MODULES
    in_left = x < EYE_MODULES
    in_top = y < EYE_MODULES
    return (in_left and in_top) or (x >= far and in_top) or (in_left and y >= far)


@trace
def render_eye(
    surface: RasterSurface,
    origin: tuple[float, float],
    size: float,
    primary: tuple[int, ...],
    secondary: tuple[int, ...],
    style: EyeStyle = EyeStyle(),
) -> None:
    """Draw one eye glyph with its top-left corner at *origin* (canvas pixels).

    Three rounded squares, each drawn over the previous one: a gradient
    outer square, a white inner square, and a solid centre dot.
    """
    x, y = origin

    surface.fill_shape(
        (x, y, size, size),
        Gradient(primary, secondary),
        radius=size * style.outer_radius,
    )

    inner = size * style.inner_ratio
    ix = x + (size - inner) / 2
    iy = y + (size - inner) / 2
    surface.fill_shape((ix, iy, inner, inner), WHITE, radius=size * style.inner_radius)

    dot = inner * style.dot_ratio
    dx = ix + (inner - dot) / 2
    dy = iy + (inner - dot) / 2
    surface.fill_shape((dx, dy, dot, dot), primary, radius=dot * style.dot_radius)


def render_eyes(surface: RasterSurface, geometry, colors, style: EyeStyle = EyeStyle()) -> None:
    """Draw all three eyes for a symbol laid out by *geometry*."""
    eye_size = geometry.module_size * EYE_MODULES
    for mx, my in eye_origins(geometry.module_count):
        render_eye(
            surface,
            geometry.module_origin(mx, my),
            eye_size,
            colors.primary,
            colors.secondary,
            style,
        )
    audit("qr.eyes_rendered", logger=log, eye_px=round(eye_size, 2), inner_ratio=round(style.inner_ratio, 3))
