"""Style engine: canvas geometry, background and gradient-filled data dots."""

from dataclasses import dataclass

import numpy as np

from linkqr.errors import InvalidGeometry, InvalidMatrix
from linkqr.eyes import is_eye_module
from linkqr.logging import audit, get_logger, trace
from linkqr.matrix import ModuleMatrix
from linkqr.surface import RasterSurface, linear_gradient, shape_mask

log = get_logger("style")


@dataclass(frozen=True)
class CanvasGeometry:
    """Pixel layout of a symbol on the canvas. Derived per render, never stored."""
    canvas_size: int
    margin: float
    module_count: int
    module_size: float
    dot_size: float

    @property
    def gap(self) -> float:
        """Empty space between neighbouring dots."""
        return self.module_size - self.dot_size

    def module_origin(self, x: int, y: int) -> tuple[float, float]:
        """Top-left canvas pixel of module (x, y)."""
        return self.margin + x * self.module_size, self.margin + y * self.module_size

    def dot_box(self, x: int, y: int) -> tuple[float, float, float, float]:
        """Bounding box of the dot centred in module (x, y)."""
        px, py = self.module_origin(x, y)
        inset = self.gap / 2
        return px + inset, py + inset, self.dot_size, self.dot_size


def compute_geometry(
    module_count: int,
    canvas_size: int = 600,
    margin: float = 30,
    dot_scale: float = 0.85,
) -> CanvasGeometry:
    """Lay out *module_count* modules inside a square canvas with a fixed margin.

    Raises:
        InvalidMatrix: module_count is not positive.
        InvalidGeometry: margin leaves no room for modules, or dot_scale is not in (0, 1].
    """
    if module_count <= 0:
        raise InvalidMatrix(f"Module count must be positive, got {module_count}")
    if not 0 < dot_scale <= 1:
        raise InvalidGeometry(f"Dot scale must be in (0, 1], got {dot_scale}")

    module_size = (canvas_size - 2 * margin) / module_count
    if module_size <= 0:
        raise InvalidGeometry(
            f"Margin {margin}px leaves no room for modules on a {canvas_size}px canvas"
        )
    return CanvasGeometry(
        canvas_size=canvas_size,
        margin=margin,
        module_count=module_count,
        module_size=module_size,
        dot_size=module_size * dot_scale,
    )


def validate_matrix(matrix: ModuleMatrix) -> int:
    """Return the side length of a non-empty square matrix, else raise InvalidMatrix."""
    size = len(matrix.modules)
    if size == 0:
        raise InvalidMatrix("Module matrix is empty")
    for y, row in enumerate(matrix.modules):
        if len(row) != size:
            raise InvalidMatrix(f"Row {y} has {len(row)} modules, expected {size}")
    return size


def paint_background(surface: RasterSurface, inner: tuple[int, ...], outer: tuple[int, ...]) -> None:
    """Subtle radial fade, light at the centre to lighter at the edge."""
    surface.fill_background(inner, outer)


@trace
def render_data_modules(surface: RasterSurface, matrix: ModuleMatrix, geometry: CanvasGeometry, colors) -> int:
    """Draw every dark module outside the eye regions as a gradient-filled circle.

    All dots share one size, so the gradient tile and circle mask are built
    once per render and stamped at each position.

    Returns:
        Number of dots drawn.
    """
    size = validate_matrix(matrix)
    if geometry.module_size <= 0:
        raise InvalidGeometry(f"Module size must be positive, got {geometry.module_size}")
    if geometry.module_count != size:
        raise InvalidGeometry(
            f"Geometry laid out for {geometry.module_count} modules, matrix has {size}"
        )

    dot_px = max(1, surface.px(geometry.dot_size))
    tile = linear_gradient(dot_px, dot_px, colors.primary, colors.secondary)
    mask = shape_mask(dot_px, dot_px, "ellipse")

    dots = 0
    for y, row in enumerate(matrix.modules):
        for x, dark in enumerate(row):
            if not dark or is_eye_module(x, y, size):
                continue
            bx, by, _, _ = geometry.dot_box(x, y)
            surface.stamp(tile, mask, (surface.px(bx), surface.px(by)))
            dots += 1

    audit("qr.modules_rendered", logger=log,
          modules=f"{size}x{size}", dots=dots,
          module_px=round(geometry.module_size, 2), dot_px=round(geometry.dot_size, 2))
    return dots


def sample_modules(image, geometry: CanvasGeometry, threshold: int = 160) -> np.ndarray:
    """Read the module grid back from a rendered image.

    Samples the pixel under each module centre and returns a bool array
    indexed [y, x], True where the pixel is darker than *threshold*.
    """
    gray = np.asarray(image.convert("L"))
    centres = geometry.margin + (np.arange(geometry.module_count) + 0.5) * geometry.module_size
    idx = np.clip(np.floor(centres).astype(int), 0, gray.shape[0] - 1)
    return gray[np.ix_(idx, idx)] < threshold
