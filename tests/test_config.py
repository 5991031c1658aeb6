"""Render configuration: colour parsing, validation and environment overrides."""

import os

import pytest

from linkqr.config import DEFAULT_BASE_URL, RenderConfig, base_url_from_env, parse_color
from linkqr.errors import InvalidColor, InvalidInput
from linkqr.eyes import EyeStyle


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # keep a developer's .env out of the way
    monkeypatch.chdir(tmp_path)
    for key in ("LINKQR_BASE_URL", "LINKQR_CANVAS_SIZE", "LINKQR_MARGIN", "LINKQR_SUPERSAMPLE",
                "LINKQR_DOT_SCALE", "LINKQR_PRIMARY_COLOR", "LINKQR_SECONDARY_COLOR", "LINKQR_LOGO_PATHS"):
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize("value, expected", [
    ("#4caf50", (76, 175, 80, 255)),
    ("#00000026", (0, 0, 0, 38)),
    ("white", (255, 255, 255, 255)),
    ("rgb(1, 2, 3)", (1, 2, 3, 255)),
])
def test_parse_color(value, expected):
    assert parse_color(value) == expected


@pytest.mark.parametrize("value", ["", "#12", "chartreuse-ish", None, 42])
def test_parse_color_rejects(value):
    with pytest.raises(InvalidColor):
        parse_color(value)


def test_invalid_color_is_invalid_input():
    with pytest.raises(InvalidInput):
        RenderConfig(secondary="nope")


def test_defaults():
    cfg = RenderConfig()
    assert (cfg.canvas_size, cfg.margin, cfg.dot_scale) == (600, 30, 0.85)
    assert cfg.colors.primary == (76, 175, 80, 255)
    assert cfg.colors.secondary == (69, 160, 73, 255)
    assert cfg.logo_size + cfg.logo_padding == 114
    assert cfg.eye_style == EyeStyle.finder()


@pytest.mark.parametrize("kwargs", [
    {"canvas_size": 0},
    {"dot_scale": 0},
    {"dot_scale": 1.2},
    {"supersample": 0},
    {"logo_fit": "cover"},
    {"logo_size": 0},
    {"logo_padding": -1},
    {"canvas_size": 100},
])
def test_rejects_out_of_range_values(kwargs):
    with pytest.raises(ValueError):
        RenderConfig(**kwargs)


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LINKQR_CANVAS_SIZE", "800")
    monkeypatch.setenv("LINKQR_PRIMARY_COLOR", "#112233")
    monkeypatch.setenv("LINKQR_LOGO_PATHS", os.pathsep.join([str(tmp_path / "a.png"), str(tmp_path / "b.png")]))

    cfg = RenderConfig.from_env(margin=40)
    assert cfg.canvas_size == 800
    assert cfg.margin == 40
    assert cfg.primary == "#112233"
    assert cfg.logo_paths == (str(tmp_path / "a.png"), str(tmp_path / "b.png"))


def test_from_env_reads_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("LINKQR_SECONDARY_COLOR=#abcdef\n")
    try:
        assert RenderConfig.from_env().secondary == "#abcdef"
    finally:
        os.environ.pop("LINKQR_SECONDARY_COLOR", None)


def test_base_url(monkeypatch):
    assert base_url_from_env() == DEFAULT_BASE_URL
    monkeypatch.setenv("LINKQR_BASE_URL", "https://linkit.app/")
    assert base_url_from_env() == "https://linkit.app"
