"""Raster surface: the one mutable canvas a render draws on.

Every drawing stage receives the same :class:`RasterSurface` and mutates it
in place. Coordinates passed in are logical canvas pixels; the surface
renders at ``scale`` times the canvas size and downsamples with Lanczos in
:meth:`RasterSurface.to_image`, which gives smooth dot and corner edges.
"""

from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageDraw, ImageFilter

RGBA = tuple[int, int, int, int]
Box = tuple[float, float, float, float]  # x, y, width, height

WHITE: RGBA = (255, 255, 255, 255)


@dataclass(frozen=True)
class Gradient:
    """Linear fill from *start* at the box's top-left to *end* at its bottom-right."""
    start: RGBA
    end: RGBA


def linear_gradient(width: int, height: int, start: RGBA, end: RGBA) -> Image.Image:
    """RGBA tile with a diagonal gradient across its full extent.

    Each pixel centre is projected onto the top-left → bottom-right vector,
    matching how a 2D canvas evaluates ``createLinearGradient(x, y, x+w, y+h)``.
    """
    width, height = max(1, width), max(1, height)
    xs = (np.arange(width, dtype=np.float64) + 0.5)[None, :]
    ys = (np.arange(height, dtype=np.float64) + 0.5)[:, None]
    t = (xs * width + ys * height) / float(width * width + height * height)
    t = np.clip(t, 0.0, 1.0)[..., None]

    a = np.asarray(start, dtype=np.float64)
    b = np.asarray(end, dtype=np.float64)
    pixels = a + (b - a) * t
    return Image.fromarray(np.rint(pixels).astype(np.uint8))


def radial_gradient(size: int, inner: RGBA, outer: RGBA) -> Image.Image:
    """Square RGBA image fading from *inner* at the centre to *outer* at radius size/2."""
    coords = np.arange(size, dtype=np.float64) + 0.5
    centre = size / 2
    dist = np.hypot(coords[None, :] - centre, coords[:, None] - centre) / centre
    t = np.clip(dist, 0.0, 1.0)[..., None]

    a = np.asarray(inner, dtype=np.float64)
    b = np.asarray(outer, dtype=np.float64)
    pixels = a + (b - a) * t
    return Image.fromarray(np.rint(pixels).astype(np.uint8))


def shape_mask(width: int, height: int, shape: str = "rounded", radius: int = 0) -> Image.Image:
    """Mode 'L' mask (255 inside) for an ellipse or rounded rectangle filling the tile."""
    width, height = max(1, width), max(1, height)
    mask = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(mask)
    if shape == "ellipse":
        draw.ellipse([0, 0, width - 1, height - 1], fill=255)
    else:
        radius = int(max(0, min(radius, (width - 1) // 2, (height - 1) // 2)))
        draw.rounded_rectangle([0, 0, width - 1, height - 1], radius=radius, fill=255)
    return mask


class RasterSurface:
    """Mutable RGBA canvas exclusively owned by one render."""

    def __init__(self, size: int, scale: int = 1, background: RGBA = WHITE):
        self.size = size
        self.scale = scale
        self.image = Image.new("RGBA", (size * scale, size * scale), background)

    def px(self, value: float) -> int:
        """Logical canvas pixels → backing-image pixels."""
        return int(round(value * self.scale))

    def _pixel_box(self, box: Box) -> tuple[int, int, int, int]:
        x, y, w, h = box
        return self.px(x), self.px(y), max(1, self.px(w)), max(1, self.px(h))

    def fill_tile(self, width: int, height: int, fill: RGBA | Gradient) -> Image.Image:
        if isinstance(fill, Gradient):
            return linear_gradient(width, height, fill.start, fill.end)
        return Image.new("RGBA", (max(1, width), max(1, height)), fill)

    def stamp(self, tile: Image.Image, mask: Image.Image, origin: tuple[int, int]) -> None:
        """Paste a prepared tile through *mask* at a backing-pixel origin."""
        self.image.paste(tile, origin, mask)

    def fill_background(self, inner: RGBA, outer: RGBA) -> None:
        self.image.paste(radial_gradient(self.image.width, inner, outer), (0, 0))

    def fill_shape(
        self,
        box: Box,
        fill: RGBA | Gradient,
        shape: str = "rounded",
        radius: float = 0.0,
    ) -> None:
        """Fill an ellipse or rounded rectangle; gradients span the shape's box."""
        x0, y0, w, h = self._pixel_box(box)
        tile = self.fill_tile(w, h, fill)
        mask = shape_mask(w, h, shape, self.px(radius))
        self.stamp(tile, mask, (x0, y0))

    def drop_shadow(
        self,
        box: Box,
        color: RGBA,
        blur: float,
        offset: tuple[float, float] = (0, 0),
        shape: str = "ellipse",
    ) -> None:
        """Composite a blurred copy of *shape* under where it will be drawn."""
        layer = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        x, y, w, h = box
        x0, y0, pw, ph = self._pixel_box((x + offset[0], y + offset[1], w, h))
        draw = ImageDraw.Draw(layer)
        if shape == "ellipse":
            draw.ellipse([x0, y0, x0 + pw - 1, y0 + ph - 1], fill=color)
        else:
            draw.rectangle([x0, y0, x0 + pw - 1, y0 + ph - 1], fill=color)
        if blur > 0:
            # canvas shadowBlur is twice the Gaussian standard deviation
            layer = layer.filter(ImageFilter.GaussianBlur(radius=blur * self.scale / 2))
        self.image.alpha_composite(layer)

    def draw_image(self, image: Image.Image, box: Box) -> None:
        """Scale *image* into *box* and alpha-composite it."""
        x0, y0, w, h = self._pixel_box(box)
        resized = image.convert("RGBA").resize((w, h), Image.LANCZOS)
        self.image.alpha_composite(resized, (x0, y0))

    def to_image(self) -> Image.Image:
        """Final RGB raster at the logical canvas size."""
        img = self.image
        if self.scale != 1:
            img = img.resize((self.size, self.size), Image.LANCZOS)
        return img.convert("RGB")
