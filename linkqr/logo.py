"""Logo compositor: resolve the brand logo and place it on a shadowed white plate."""

from pathlib import Path
from typing import Callable, Iterable

import numpy as np
from PIL import Image

from linkqr.errors import LogoLoadFailure
from linkqr.logging import audit, get_logger, trace
from linkqr.matrix import ECC_RECOVERY
from linkqr.surface import WHITE, RasterSurface

log = get_logger("logo")

LogoProvider = Callable[[], "Image.Image | None"]


# ---------------------------------------------------------------------------
# Asset resolution
# ---------------------------------------------------------------------------

@trace
def load_logo(path: str | Path) -> Image.Image:
    """Decode a logo file into an RGBA image.

    Raises:
        LogoLoadFailure: the file is unreadable or not a raster Pillow can decode
            (SVG logos land here).
    """
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, Image.DecompressionBombError) as exc:
        raise LogoLoadFailure(f"Could not load logo {path}: {exc}") from exc


class LogoResolver:
    """Asset provider over an ordered list of candidate files; the first existing one wins."""

    def __init__(self, candidates: Iterable[str | Path]):
        self.candidates = tuple(Path(c) for c in candidates)

    def resolve(self) -> Path | None:
        for path in self.candidates:
            if path.is_file():
                return path
        return None

    def __call__(self) -> Image.Image | None:
        path = self.resolve()
        if path is None:
            audit("logo.missing", logger=log, candidates=len(self.candidates))
            return None
        audit("logo.resolved", logger=log, path=str(path))
        return load_logo(path)

    def __repr__(self):
        return f"LogoResolver({[str(c) for c in self.candidates]!r})"


def _obtain(logo: "Image.Image | LogoProvider | None") -> Image.Image | None:
    if logo is None or isinstance(logo, Image.Image):
        return logo
    try:
        return logo()
    except LogoLoadFailure as exc:
        log.warning("Rendering without logo: %s", exc)
        audit("logo.load_failed", logger=log, error=str(exc))
        return None


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def _scale_preserving_aspect(original_size: tuple[int, int], target: int) -> tuple[int, int]:
    """Scale (w, h) so the larger dimension equals *target*, preserving aspect."""
    w, h = original_size
    aspect = w / h
    if aspect >= 1:
        return target, max(1, int(target / aspect))
    return max(1, int(target * aspect)), target


def logo_occlusion(geometry, plate_diameter: float) -> float:
    """Fraction of the symbol's modules whose centre lies under the logo plate."""
    n = geometry.module_count
    centres = geometry.margin + (np.arange(n) + 0.5) * geometry.module_size
    mid = geometry.canvas_size / 2
    dist = np.hypot(centres[None, :] - mid, centres[:, None] - mid)
    covered = np.count_nonzero(dist <= plate_diameter / 2)
    return covered / float(n * n)


# ---------------------------------------------------------------------------
# Compositing
# ---------------------------------------------------------------------------

@trace
def composite_logo(
    surface: RasterSurface,
    canvas_size: int,
    logo: "Image.Image | LogoProvider | None" = None,
    *,
    logo_size: int = 90,
    padding: int = 24,
    fit: str = "contain",
    shadow_color: tuple[int, ...] = (0, 0, 0, 38),
    shadow_blur: float = 15,
    shadow_offset: tuple[float, float] = (0, 5),
    geometry=None,
    ecc: str = "H",
) -> RasterSurface:
    """Overlay the centre logo on a white circular plate with a soft shadow.

    *logo* is an image, an asset provider (called here; load failures
    degrade to "no logo"), or None. Without a logo the surface is returned
    untouched.

    When *geometry* is given, the plate's module coverage is checked against
    half of the ECC level's recovery capacity and a warning is logged if it
    exceeds it.
    """
    image = _obtain(logo)
    if image is None:
        return surface

    plate = logo_size + padding
    plate_xy = (canvas_size - plate) / 2
    plate_box = (plate_xy, plate_xy, plate, plate)

    surface.drop_shadow(plate_box, shadow_color, shadow_blur, shadow_offset)
    surface.fill_shape(plate_box, WHITE, shape="ellipse")

    if fit == "stretch":
        w, h = logo_size, logo_size
    else:
        w, h = _scale_preserving_aspect(image.size, logo_size)
    surface.draw_image(image, ((canvas_size - w) / 2, (canvas_size - h) / 2, w, h))

    occlusion = None
    if geometry is not None:
        occlusion = logo_occlusion(geometry, plate)
        budget = ECC_RECOVERY[ecc.upper()] / 2
        if occlusion > budget:
            log.warning(
                "Logo plate covers %.1f%% of modules, above the %.1f%% budget for ECC %s",
                occlusion * 100, budget * 100, ecc.upper(),
            )

    audit("logo.composited", logger=log,
          logo_px=f"{w}x{h}", plate_px=plate, fit=fit,
          occlusion=f"{occlusion:.1%}" if occlusion is not None else "n/a")
    return surface
