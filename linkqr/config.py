"""Render configuration: canvas constants, colour scheme and logo candidates.

Values come from keyword arguments or, through :meth:`RenderConfig.from_env`,
from ``LINKQR_*`` environment variables (a local ``.env`` file is loaded
first so development setups need no exported variables).
"""

import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv
from PIL import ImageColor

from linkqr.errors import InvalidColor
from linkqr.eyes import EyeStyle

RGBA = tuple[int, int, int, int]

DEFAULT_BASE_URL = "http://localhost:3000"

DEFAULT_LOGO_PATHS = (
    "static/images/logo.png",
    "static/images/logo.svg",
    "static/images/logo_light_mode.svg",
)

LOGO_FITS = ("contain", "stretch")


def parse_color(value) -> RGBA:
    """Parse any Pillow colour string ('#4caf50', 'rgb(…)', 'white') to RGBA."""
    try:
        rgb = ImageColor.getrgb(value)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidColor(f"Unrecognised colour {value!r}") from exc
    if len(rgb) == 3:
        return (*rgb, 255)
    return tuple(rgb)


@dataclass(frozen=True)
class ColorScheme:
    """Primary/secondary pair shared by data dots and eye gradients."""
    primary: RGBA
    secondary: RGBA


@dataclass(frozen=True)
class RenderConfig:
    canvas_size: int = 600
    margin: int = 30
    dot_scale: float = 0.85
    supersample: int = 2
    primary: str = "#4caf50"
    secondary: str = "#45a049"
    background_inner: str = "#FFFFFF"
    background_outer: str = "#F8F9FA"
    eye_style: EyeStyle = field(default_factory=EyeStyle.finder)
    logo_size: int = 90
    logo_padding: int = 24
    logo_fit: str = "contain"
    shadow_color: str = "#00000026"  # black at 15 % opacity
    shadow_blur: float = 15
    shadow_offset: tuple[int, int] = (0, 5)
    logo_paths: tuple[str, ...] = DEFAULT_LOGO_PATHS

    def __post_init__(self):
        for name in ("primary", "secondary", "background_inner", "background_outer", "shadow_color"):
            parse_color(getattr(self, name))
        if self.canvas_size <= 0:
            raise ValueError(f"canvas_size must be positive, got {self.canvas_size}")
        if not 0 < self.dot_scale <= 1:
            raise ValueError(f"dot_scale must be in (0, 1], got {self.dot_scale}")
        if self.supersample < 1:
            raise ValueError(f"supersample must be >= 1, got {self.supersample}")
        if self.logo_fit not in LOGO_FITS:
            raise ValueError(f"logo_fit must be one of {LOGO_FITS}, got {self.logo_fit!r}")
        if self.logo_size <= 0 or self.logo_padding < 0:
            raise ValueError("logo_size must be positive and logo_padding non-negative")
        if self.logo_size + self.logo_padding > self.canvas_size:
            raise ValueError(
                f"Logo plate ({self.logo_size + self.logo_padding}px) does not fit a {self.canvas_size}px canvas"
            )

    @property
    def colors(self) -> ColorScheme:
        return ColorScheme(parse_color(self.primary), parse_color(self.secondary))

    @classmethod
    def from_env(cls, **overrides) -> "RenderConfig":
        """Build a config from ``LINKQR_*`` environment variables.

        Keyword arguments win over the environment.
        """
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ
        values = {}
        for key, name, cast in (
            ("LINKQR_CANVAS_SIZE", "canvas_size", int),
            ("LINKQR_MARGIN", "margin", int),
            ("LINKQR_SUPERSAMPLE", "supersample", int),
            ("LINKQR_DOT_SCALE", "dot_scale", float),
            ("LINKQR_PRIMARY_COLOR", "primary", str),
            ("LINKQR_SECONDARY_COLOR", "secondary", str),
        ):
            if env.get(key):
                values[name] = cast(env[key])
        if env.get("LINKQR_LOGO_PATHS"):
            values["logo_paths"] = tuple(p for p in env["LINKQR_LOGO_PATHS"].split(os.pathsep) if p)
        values.update(overrides)
        return cls(**values)


def base_url_from_env() -> str:
    """Public base URL profile links are built from (no trailing slash)."""
    load_dotenv(find_dotenv(usecwd=True))
    return os.environ.get("LINKQR_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
