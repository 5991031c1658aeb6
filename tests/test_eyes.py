"""Eye renderer: region bookkeeping and the nested three-layer glyph."""

import pytest

from linkqr.config import ColorScheme
from linkqr.eyes import EyeStyle, eye_origins, is_eye_module, render_eye, render_eyes
from linkqr.style import compute_geometry
from linkqr.surface import RasterSurface

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)


def test_eye_origins_are_the_three_finder_corners():
    assert eye_origins(21) == [(0, 0), (14, 0), (0, 14)]
    assert eye_origins(33) == [(0, 0), (26, 0), (0, 26)]


@pytest.mark.parametrize("x, y, expected", [
    (0, 0, True),
    (6, 6, True),
    (7, 6, False),
    (14, 0, True),
    (20, 6, True),
    (13, 0, False),
    (0, 20, True),
    (6, 14, True),
    (14, 14, False),
    (20, 20, False),
    (10, 10, False),
])
def test_is_eye_module(x, y, expected):
    assert is_eye_module(x, y, 21) is expected


def test_eye_glyph_layers():
    surface = RasterSurface(70)
    render_eye(surface, (0, 0), 70, RED, BLUE)
    img = surface.image

    # centre dot: solid primary
    assert img.getpixel((35, 35)) == RED
    # white square between dot and outer ring
    assert img.getpixel((22, 35)) == WHITE
    # outer ring: gradient, neither white nor green
    r, g, b, a = img.getpixel((10, 35))
    assert (r, g, b, a) != WHITE
    assert g == 0 and r > 0 and b > 0
    # rounded corner leaves the background showing
    assert img.getpixel((1, 1)) == WHITE


def test_outer_gradient_runs_diagonally():
    surface = RasterSurface(70)
    render_eye(surface, (0, 0), 70, RED, BLUE)
    r1, _, b1, _ = surface.image.getpixel((8, 8))
    r2, _, b2, _ = surface.image.getpixel((61, 61))
    assert r1 > b1
    assert b2 > r2


def test_finder_style_keeps_one_module_rings():
    style = EyeStyle.finder()
    assert style.inner_ratio == pytest.approx(5 / 7)

    surface = RasterSurface(70)
    render_eye(surface, (0, 0), 70, RED, BLUE, style)
    # module 1 of 7 is the light ring, module 2 is the dark centre
    assert surface.image.getpixel((15, 35)) == WHITE
    assert surface.image.getpixel((25, 35)) == RED


def test_render_eyes_draws_at_every_corner():
    surface = RasterSurface(210)
    geometry = compute_geometry(21, canvas_size=210, margin=0)
    render_eyes(surface, geometry, ColorScheme(RED, BLUE))
    for mx, my in eye_origins(21):
        assert surface.image.getpixel((mx * 10 + 35, my * 10 + 35)) == RED
    assert surface.image.getpixel((105, 105)) == WHITE
